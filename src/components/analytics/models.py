"""
Analytics component input/output models and errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.core.entities import Event

# --- Errors ---


@dataclass(frozen=True)
class AnalyticsValidationError:
    """Single validation problem, reported back to the caller."""

    code: str
    message: str
    field_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "field": self.field_name}


class AnalyticsError(Exception):
    """Base class for analytics failures."""


class ValidationError(AnalyticsError):
    """Invalid ingestion payload or query parameter. Never retried."""

    def __init__(self, errors: list[AnalyticsValidationError]) -> None:
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors))

    @classmethod
    def single(cls, code: str, message: str, field_name: str | None = None) -> ValidationError:
        return cls([AnalyticsValidationError(code=code, message=message, field_name=field_name)])


class NotFoundError(AnalyticsError):
    """Referenced website does not exist (or is not visible to the caller)."""

    def __init__(self, message: str, website_id: str | None = None) -> None:
        self.website_id = website_id
        super().__init__(message)


class StoreUnavailable(AnalyticsError):
    """Event store unreachable or timed out. No partial results are returned."""


# --- Periods ---


class Period(str, Enum):
    """Calendar periods for the visit series."""

    DAY = "day"
    MONTH = "month"
    YEAR = "year"


RANGE_PERIODS: tuple[str, ...] = ("24h", "7d", "30d", "90d")


class BucketKind(str, Enum):
    """How an event timestamp maps onto a bucket."""

    HOUR_OF_DAY = "hour_of_day"
    DAY_OF_MONTH = "day_of_month"
    MONTH_OF_YEAR = "month_of_year"


@dataclass(frozen=True)
class BucketSpec:
    """Ordered bucket labels plus the rule used to key events into them."""

    kind: BucketKind
    labels: tuple[str, ...]

    def index_for(self, local_ts: datetime) -> int:
        """Zero-based bucket index for a timestamp already in local time."""
        if self.kind == BucketKind.HOUR_OF_DAY:
            return local_ts.hour
        if self.kind == BucketKind.DAY_OF_MONTH:
            return local_ts.day - 1
        return local_ts.month - 1

    def __len__(self) -> int:
        return len(self.labels)


@dataclass(frozen=True)
class ResolvedPeriod:
    """Concrete [start, end] window and bucketing for a symbolic period."""

    period: Period
    start: datetime
    end: datetime
    bucket_spec: BucketSpec


@dataclass(frozen=True)
class TimeRange:
    """Caller-supplied window, inclusive on both ends."""

    start: datetime
    end: datetime


# --- Visit series ---


@dataclass(frozen=True)
class VisitBucket:
    label: str
    count: int


@dataclass(frozen=True)
class VisitSeries:
    """Totals and zero-filled histogram for one period."""

    total_visits: int
    unique_viewers: int
    buckets: tuple[VisitBucket, ...]
    period: Period
    include_events: bool


# --- Full analytics (legacy dashboard) ---


@dataclass(frozen=True)
class PageCount:
    path: str
    views: int


@dataclass(frozen=True)
class ReferrerCount:
    referrer: str
    count: int


@dataclass(frozen=True)
class DeviceCount:
    device: str
    count: int


@dataclass(frozen=True)
class DailyViews:
    date: str
    views: int


@dataclass(frozen=True)
class AnalyticsData:
    """Full dashboard metrics for a time range."""

    total_page_views: int
    unique_visitors: int
    total_events: int
    bounce_rate: float
    average_session_duration: int
    top_pages: tuple[PageCount, ...] = ()
    top_referrers: tuple[ReferrerCount, ...] = ()
    device_breakdown: tuple[DeviceCount, ...] = ()
    daily_page_views: tuple[DailyViews, ...] = ()
    realtime_visitors: int = 0


@dataclass(frozen=True)
class RealtimeData:
    """Activity in the last few minutes."""

    active_visitors: int
    new_visitors: int
    recent_events: tuple[Event, ...] = field(default_factory=tuple)


# --- Inputs ---


@dataclass(frozen=True)
class IngestEventInput:
    """Raw event payload from the tracking snippet."""

    data: dict[str, Any]
    client_ip: str = "unknown"
    user_agent: str | None = None


@dataclass(frozen=True)
class VisitSeriesInput:
    website_id: str
    period: str
    include_events: bool = False


@dataclass(frozen=True)
class AnalyticsDataInput:
    website_id: str
    time_range: TimeRange
