"""
Period resolution for the visit series and the rolling dashboard ranges.

Calendar periods (day / month / year) run from the first local instant of
the current period up to `now`. Bucket keys are read from each event's
timestamp converted into the same zone as `now`, so range and buckets share
one local-time interpretation.

Key behaviors:
- day: 24 hourly buckets "00".."23"
- month: one bucket per day of the current month, "1".."N"
- year: 12 buckets "Jan".."Dec"
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta

from .models import (
    RANGE_PERIODS,
    BucketKind,
    BucketSpec,
    Period,
    ResolvedPeriod,
    TimeRange,
    ValidationError,
)

MONTH_LABELS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)  # fmt: skip

HOUR_LABELS: tuple[str, ...] = tuple(f"{h:02d}" for h in range(24))

RANGE_DELTAS: dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}


def parse_period(period: str | Period) -> Period:
    """Validate a symbolic period against {day, month, year}."""
    if isinstance(period, Period):
        return period
    try:
        return Period(period)
    except ValueError:
        raise ValidationError.single(
            code="invalid_period",
            message=f"Invalid period: {period}. Must be one of: day, month, year",
            field_name="period",
        ) from None


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def bucket_spec_for(period: Period, now: datetime) -> BucketSpec:
    """Bucket layout for a period; month size depends on `now`."""
    if period == Period.DAY:
        return BucketSpec(kind=BucketKind.HOUR_OF_DAY, labels=HOUR_LABELS)
    if period == Period.MONTH:
        n_days = days_in_month(now.year, now.month)
        return BucketSpec(
            kind=BucketKind.DAY_OF_MONTH,
            labels=tuple(str(d) for d in range(1, n_days + 1)),
        )
    return BucketSpec(kind=BucketKind.MONTH_OF_YEAR, labels=MONTH_LABELS)


def period_start(period: Period, now: datetime) -> datetime:
    """First local instant of the period containing `now`."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == Period.DAY:
        return midnight
    if period == Period.MONTH:
        return midnight.replace(day=1)
    return midnight.replace(month=1, day=1)


def resolve_period(period: str | Period, now: datetime) -> ResolvedPeriod:
    """
    Map a symbolic period to a concrete window and bucket layout.

    Args:
        period: "day", "month" or "year".
        now: Current instant, timezone-aware, in the bucketing zone.

    Returns:
        ResolvedPeriod with start <= end == now.

    Raises:
        ValidationError: Unknown period symbol.
    """
    p = parse_period(period)
    return ResolvedPeriod(
        period=p,
        start=period_start(p, now),
        end=now,
        bucket_spec=bucket_spec_for(p, now),
    )


def get_time_range(period: str, now: datetime) -> TimeRange:
    """Rolling window ending at `now` for 24h / 7d / 30d / 90d."""
    delta = RANGE_DELTAS.get(period)
    if delta is None:
        raise ValidationError.single(
            code="invalid_period",
            message=f"Valid period is required ({', '.join(RANGE_PERIODS)})",
            field_name="period",
        )
    return TimeRange(start=now - delta, end=now)
