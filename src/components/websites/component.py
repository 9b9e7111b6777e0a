"""
Websites component - Tracked website management.

Shell Layer - builds the service from injected ports.
"""

from __future__ import annotations

from src.core.entities import Website

from ._impl import WebsiteService
from .models import CreateWebsiteInput, ListWebsitesInput, WebsiteSummary
from .ports import WebsiteRepoPort


def run_create(inp: CreateWebsiteInput, *, repo: WebsiteRepoPort) -> Website:
    """Register a website for the calling user."""
    return WebsiteService(repo).create(inp.user_id, inp.name, inp.domain)


def run_list(inp: ListWebsitesInput, *, repo: WebsiteRepoPort) -> list[WebsiteSummary]:
    """List the calling user's websites with event counts."""
    return WebsiteService(repo).list_for_user(inp.user_id)
