"""
AggregateService - Visit series and dashboard metrics.

Computes aggregates from raw events read through the EventStorePort.
All computation is in memory over one query result; the service holds no
mutable state, so calls are safe to run concurrently.

Key behaviors:
- Visit series: total, distinct sessions, zero-filled buckets for day/month/year
- Full analytics: bounce rate, session duration, top pages/referrers,
  device breakdown, daily page views, realtime visitors
- Realtime: active and new visitors in the last minutes
- Store failures propagate as StoreUnavailable, never as zero results
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from urllib.parse import urlparse
from uuid import UUID

from src.core.entities import PAGEVIEW, Event

from ._period import get_time_range, resolve_period
from .models import (
    AnalyticsData,
    DailyViews,
    DeviceCount,
    PageCount,
    Period,
    RealtimeData,
    ReferrerCount,
    ResolvedPeriod,
    TimeRange,
    ValidationError,
    VisitBucket,
    VisitSeries,
)
from .ports import ClockPort, EventStorePort

# --- Configuration ---


@dataclass(frozen=True)
class AggregateConfig:
    """Aggregation configuration."""

    top_n: int = 10

    # Device classes by screen width
    mobile_max_width: int = 768
    tablet_max_width: int = 1024

    # Realtime windows
    realtime_window_seconds: int = 300
    realtime_new_window_seconds: int = 60
    realtime_sample_size: int = 50
    realtime_recent_events: int = 10


DEFAULT_CONFIG = AggregateConfig()


# --- Pure helpers ---


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a dashboard would (0.5 goes up), not banker's rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def referrer_hostname(referrer: str | None) -> str | None:
    """Hostname of a referrer URL, or None if empty or unparseable."""
    if not referrer:
        return None
    try:
        parsed = urlparse(referrer)
        host = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme or not host:
        return None
    return host


def classify_device(screen_width: int | None, config: AggregateConfig = DEFAULT_CONFIG) -> str | None:
    """Mobile / Tablet / Desktop by screen width; None when width is unknown."""
    if not screen_width:
        return None
    if screen_width < config.mobile_max_width:
        return "Mobile"
    if screen_width < config.tablet_max_width:
        return "Tablet"
    return "Desktop"


def count_by_key(keys: Iterable[str | None]) -> dict[str, int]:
    """Count keys in first-seen order, skipping None."""
    counts: dict[str, int] = {}
    for key in keys:
        if key is None:
            continue
        counts[key] = counts.get(key, 0) + 1
    return counts


def top_n(counts: dict[str, int], n: int) -> list[tuple[str, int]]:
    """
    Highest counts first.

    sorted() is stable, so ties keep first-encountered order.
    """
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:n]


def distinct_sessions(events: Iterable[Event]) -> int:
    return len({e.session_id for e in events})


def bucket_events(events: Iterable[Event], resolved: ResolvedPeriod) -> tuple[VisitBucket, ...]:
    """
    Zero-filled histogram over the resolved bucket layout.

    Timestamps are converted into the zone of the period end before keying.
    Events whose key falls outside the layout are dropped.
    """
    spec = resolved.bucket_spec
    counts = [0] * len(spec)
    tz = resolved.end.tzinfo

    for event in events:
        index = spec.index_for(event.created_at.astimezone(tz))
        if 0 <= index < len(counts):
            counts[index] += 1

    return tuple(
        VisitBucket(label=label, count=count)
        for label, count in zip(spec.labels, counts, strict=True)
    )


def build_visit_series(
    events: list[Event],
    resolved: ResolvedPeriod,
    include_events: bool,
) -> VisitSeries:
    """Visit series from events already filtered to the period window."""
    return VisitSeries(
        total_visits=len(events),
        unique_viewers=distinct_sessions(events),
        buckets=bucket_events(events, resolved),
        period=resolved.period,
        include_events=include_events,
    )


def average_session_seconds(events: Iterable[Event]) -> int:
    """Mean of (last - first) timestamp per session, in whole seconds."""
    spans: dict[str | None, tuple[datetime, datetime]] = {}
    for event in events:
        ts = event.created_at
        span = spans.get(event.session_id)
        if span is None:
            spans[event.session_id] = (ts, ts)
        else:
            spans[event.session_id] = (min(span[0], ts), max(span[1], ts))

    if not spans:
        return 0

    total = sum((last - first).total_seconds() for first, last in spans.values())
    return int(round_half_up(total / len(spans)))


def bounce_rate(page_views: Iterable[Event], unique_visitors: int) -> float:
    """Share of sessions with exactly one page view, as a percentage."""
    if unique_visitors == 0:
        return 0.0
    per_session: dict[str | None, int] = {}
    for event in page_views:
        per_session[event.session_id] = per_session.get(event.session_id, 0) + 1
    single_page = sum(1 for count in per_session.values() if count == 1)
    return round_half_up(single_page / unique_visitors * 100, 2)


def compute_analytics_data(
    events: list[Event],
    realtime_visitors: int,
    config: AggregateConfig = DEFAULT_CONFIG,
) -> AnalyticsData:
    """
    Full dashboard metrics from events in the window, oldest first.

    Args:
        events: Events with created_at inside the requested range.
        realtime_visitors: Distinct sessions of the realtime window.
        config: Top-N size and device breakpoints.
    """
    page_views = [e for e in events if e.is_pageview]
    unique_visitors = distinct_sessions(events)

    page_counts = count_by_key(e.path or e.event_name for e in page_views)
    referrer_counts = count_by_key(referrer_hostname(e.referrer) for e in events)
    device_counts = count_by_key(classify_device(e.screen_width, config) for e in events)
    daily_counts = count_by_key(e.created_at.date().isoformat() for e in page_views)

    return AnalyticsData(
        total_page_views=len(page_views),
        unique_visitors=unique_visitors,
        total_events=len(events),
        bounce_rate=bounce_rate(page_views, unique_visitors),
        average_session_duration=average_session_seconds(events),
        top_pages=tuple(PageCount(path=p, views=v) for p, v in top_n(page_counts, config.top_n)),
        top_referrers=tuple(
            ReferrerCount(referrer=r, count=c) for r, c in top_n(referrer_counts, config.top_n)
        ),
        device_breakdown=tuple(DeviceCount(device=d, count=c) for d, c in device_counts.items()),
        daily_page_views=tuple(
            DailyViews(date=d, views=v) for d, v in sorted(daily_counts.items())
        ),
        realtime_visitors=realtime_visitors,
    )


def parse_website_id(website_id: str | UUID) -> UUID:
    """Website ids are UUIDs; anything else is a validation failure."""
    if isinstance(website_id, UUID):
        return website_id
    if not website_id:
        raise ValidationError.single(
            code="website_id_required",
            message="Website ID is required",
            field_name="website_id",
        )
    try:
        return UUID(website_id)
    except ValueError:
        raise ValidationError.single(
            code="invalid_website_id",
            message="Website ID must be a valid UUID",
            field_name="website_id",
        ) from None


# --- Aggregate Service ---


class AggregateService:
    """
    Read-only aggregation over an injected event store.

    The store handle and clock are passed in once at construction; the
    service never caches results between calls.
    """

    def __init__(
        self,
        store: EventStorePort,
        clock: ClockPort,
        config: AggregateConfig | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._config = config or DEFAULT_CONFIG

    def get_visit_series(
        self,
        website_id: str | UUID,
        period: str | Period,
        include_events: bool = False,
    ) -> VisitSeries:
        """
        Visit counts for the current day, month or year.

        Only page views are counted unless include_events is set.

        Raises:
            ValidationError: Empty website id or unknown period.
            StoreUnavailable: Event store failure.
        """
        wid = parse_website_id(website_id)
        resolved = resolve_period(period, self._clock.now_local())

        events = self._store.query(
            wid,
            start=resolved.start,
            end=resolved.end,
            event_type=None if include_events else PAGEVIEW,
        )
        return build_visit_series(events, resolved, include_events)

    def get_analytics_data(self, website_id: str | UUID, time_range: TimeRange) -> AnalyticsData:
        """Full dashboard metrics for an explicit [start, end] window."""
        wid = parse_website_id(website_id)
        events = self._store.query(wid, start=time_range.start, end=time_range.end, order="asc")

        since = self._clock.now_utc() - timedelta(seconds=self._config.realtime_window_seconds)
        recent = self._store.query(wid, start=since)

        return compute_analytics_data(events, distinct_sessions(recent), self._config)

    def get_analytics_for_period(self, website_id: str | UUID, period: str) -> AnalyticsData:
        """Full dashboard metrics for a rolling 24h / 7d / 30d / 90d window."""
        return self.get_analytics_data(website_id, get_time_range(period, self._clock.now_utc()))

    def get_unique_viewers(self, website_id: str | UUID, time_range: TimeRange) -> int:
        """Distinct sessions across all events in the window."""
        wid = parse_website_id(website_id)
        events = self._store.query(wid, start=time_range.start, end=time_range.end)
        return distinct_sessions(events)

    def get_realtime_data(self, website_id: str | UUID) -> RealtimeData:
        """Visitors active in the realtime window, newest events first."""
        wid = parse_website_id(website_id)
        now = self._clock.now_utc()
        since = now - timedelta(seconds=self._config.realtime_window_seconds)
        new_since = now - timedelta(seconds=self._config.realtime_new_window_seconds)

        recent = self._store.query(
            wid,
            start=since,
            order="desc",
            limit=self._config.realtime_sample_size,
        )

        return RealtimeData(
            active_visitors=distinct_sessions(recent),
            new_visitors=distinct_sessions(e for e in recent if e.created_at >= new_since),
            recent_events=tuple(recent[: self._config.realtime_recent_events]),
        )


# --- Factory ---


def create_aggregate_service(
    store: EventStorePort,
    clock: ClockPort,
    config: AggregateConfig | None = None,
) -> AggregateService:
    """Create an AggregateService."""
    return AggregateService(store=store, clock=clock, config=config)
