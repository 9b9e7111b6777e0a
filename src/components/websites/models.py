"""
Websites component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.entities import Website


@dataclass(frozen=True)
class CreateWebsiteInput:
    """Input for registering a website."""

    user_id: str
    name: str
    domain: str


@dataclass(frozen=True)
class ListWebsitesInput:
    """Input for listing a user's websites."""

    user_id: str


@dataclass(frozen=True)
class WebsiteSummary:
    """Website plus its recorded event count."""

    website: Website
    event_count: int
