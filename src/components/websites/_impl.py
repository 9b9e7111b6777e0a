"""
WebsiteService - Website registration and ownership lookups.

Key behaviors:
- name and domain are required
- Websites are listed newest first with event counts
- A website owned by another user is reported as not found
"""

from __future__ import annotations

import logging
from uuid import UUID

from src.components.analytics import (
    AnalyticsValidationError,
    InMemoryEventStore,
    NotFoundError,
    ValidationError,
    parse_website_id,
)
from src.core.entities import Website

from .models import WebsiteSummary
from .ports import WebsiteRepoPort

logger = logging.getLogger(__name__)


# --- Default Implementations ---


class InMemoryWebsiteRepo:
    """In-memory website repository for testing/dev."""

    def __init__(self, events: InMemoryEventStore | None = None) -> None:
        self._websites: dict[UUID, Website] = {}
        self._events = events

    def get_by_id(self, website_id: UUID) -> Website | None:
        return self._websites.get(website_id)

    def save(self, website: Website) -> Website:
        self._websites[website.id] = website
        return website

    def list_for_user(self, user_id: str) -> list[tuple[Website, int]]:
        owned = [w for w in self._websites.values() if w.user_id == user_id]
        owned.sort(key=lambda w: w.created_at, reverse=True)
        return [(w, self._count_events(w.id)) for w in owned]

    def _count_events(self, website_id: UUID) -> int:
        if self._events is None:
            return 0
        return len(self._events.query(website_id))


# --- Validation Functions ---


def validate_website_data(name: str | None, domain: str | None) -> list[AnalyticsValidationError]:
    """Name and domain must be non-empty; domains carry no whitespace."""
    errors: list[AnalyticsValidationError] = []

    if not name or not name.strip():
        errors.append(
            AnalyticsValidationError(code="name_required", message="Name is required", field_name="name")
        )

    if not domain or not domain.strip():
        errors.append(
            AnalyticsValidationError(
                code="domain_required", message="Domain is required", field_name="domain"
            )
        )
    elif any(ch.isspace() for ch in domain.strip()):
        errors.append(
            AnalyticsValidationError(
                code="invalid_domain",
                message="Domain must not contain whitespace",
                field_name="domain",
            )
        )

    return errors


# --- Website Service ---


class WebsiteService:
    """Website registration and lookup scoped to an owning user."""

    def __init__(self, repo: WebsiteRepoPort) -> None:
        self._repo = repo

    def create(self, user_id: str, name: str, domain: str) -> Website:
        """
        Register a website for a user.

        Raises:
            ValidationError: Missing name or domain.
        """
        errors = validate_website_data(name, domain)
        if errors:
            raise ValidationError(errors)

        website = Website(name=name.strip(), domain=domain.strip().lower(), user_id=user_id)
        saved = self._repo.save(website)
        logger.info("Website %s (%s) created for user %s", saved.id, saved.domain, user_id)
        return saved

    def list_for_user(self, user_id: str) -> list[WebsiteSummary]:
        """Websites owned by a user, newest first."""
        return [
            WebsiteSummary(website=website, event_count=count)
            for website, count in self._repo.list_for_user(user_id)
        ]

    def get_owned(self, user_id: str, website_id: str | UUID) -> Website:
        """
        Website owned by user_id.

        Raises:
            ValidationError: Empty or malformed id.
            NotFoundError: Missing, or owned by someone else.
        """
        wid = parse_website_id(website_id)
        website = self._repo.get_by_id(wid)
        if website is None or website.user_id != user_id:
            raise NotFoundError("Website not found", website_id=str(wid))
        return website
