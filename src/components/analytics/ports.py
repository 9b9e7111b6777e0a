"""
Analytics component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Protocol
from uuid import UUID

from src.core.entities import Event, Website


class EventStorePort(Protocol):
    """
    Append-only event storage.

    Implementations raise StoreUnavailable when the backing store cannot be
    reached; they never return partial results.
    """

    def insert(self, event: Event) -> Event:
        """Append one event."""
        ...

    def query(
        self,
        website_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        event_type: str | None = None,
        order: Literal["asc", "desc"] = "asc",
        limit: int | None = None,
    ) -> list[Event]:
        """Events for a website with created_at in [start, end] (both inclusive)."""
        ...


class WebsiteLookupPort(Protocol):
    """Website lookup used to reject events for unknown sites."""

    def get_by_id(self, website_id: UUID) -> Website | None:
        ...


class ClockPort(Protocol):
    """Time provider; local time is the zone used for period bucketing."""

    def now_utc(self) -> datetime:
        ...

    def now_local(self) -> datetime:
        """Aware local time; its tzinfo must resolve DST per instant, not a fixed offset."""
        ...
