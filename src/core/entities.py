"""
Domain entities for site analytics.

- Website: a tracked site owned by one user.
- Event: an immutable page view or custom event recorded for a website.

Events are append-only. created_at is assigned by the server clock at
insertion and stored in UTC.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

EventType = Literal["pageview", "custom"]

PAGEVIEW: EventType = "pageview"
CUSTOM: EventType = "custom"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Website(BaseModel):
    """A website whose events are tracked."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    domain: str
    user_id: str
    created_at: datetime = Field(default_factory=_utcnow)


class Event(BaseModel):
    """
    Recorded analytics event.

    Invariants:
    - belongs to exactly one website
    - never updated after insertion

    session_id is assigned client-side and is not globally unique; events
    sharing a session_id count as one session.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    website_id: UUID
    session_id: str | None = None
    event_type: EventType
    event_name: str
    path: str | None = None
    referrer: str | None = None
    user_agent: str | None = None
    screen_width: int | None = None
    screen_height: int | None = None
    country: str | None = None
    city: str | None = None
    ip: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_pageview(self) -> bool:
        return self.event_type == PAGEVIEW
