"""
Websites component port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.core.entities import Website


class WebsiteRepoPort(Protocol):
    """Website persistence."""

    def get_by_id(self, website_id: UUID) -> Website | None:
        ...

    def save(self, website: Website) -> Website:
        ...

    def list_for_user(self, user_id: str) -> list[tuple[Website, int]]:
        """Websites owned by a user, newest first, with their event counts."""
        ...
