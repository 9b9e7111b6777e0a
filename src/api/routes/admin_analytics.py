"""
Dashboard Analytics API.

Query endpoints behind the dashboard. Every route checks that the website
belongs to the calling user before reading its events.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query

from src.api.deps import get_aggregate_service, get_clock, get_current_user_id, get_website_service
from src.api.errors import to_http_exception
from src.api.schemas import (
    AnalyticsDataResponse,
    ErrorResponse,
    RealtimeResponse,
    TimeRangeModel,
    UniqueViewersResponse,
    VisitSeriesResponse,
)
from src.components.analytics import (
    AggregateService,
    AnalyticsError,
    ClockPort,
    TimeRange,
    ValidationError,
    get_time_range,
)
from src.components.websites import WebsiteService
from src.core.entities import Website

router = APIRouter()

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# --- Helper Functions ---


def parse_datetime(dt_str: str, field_name: str) -> datetime:
    """Parse an ISO datetime; naive values are taken as UTC."""
    try:
        # Try ISO format with Z
        if dt_str.endswith("Z"):
            dt_str = dt_str[:-1] + "+00:00"
        dt = datetime.fromisoformat(dt_str)
    except ValueError:
        raise ValidationError.single(
            code="invalid_datetime",
            message=f"Invalid datetime format: {dt_str}",
            field_name=field_name,
        ) from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def time_range_from(clock: ClockPort, period: str, start: str | None, end: str | None) -> TimeRange:
    """
    Explicit [start, end] when both are given, else the rolling period.

    Raises:
        ValidationError: Only one bound given, unparseable bound, start
            after end, or unknown period.
    """
    if start is None and end is None:
        return get_time_range(period, clock.now_utc())
    if start is None or end is None:
        raise ValidationError.single(
            code="incomplete_range",
            message="start and end must be given together",
            field_name="start" if start is None else "end",
        )
    time_range = TimeRange(start=parse_datetime(start, "start"), end=parse_datetime(end, "end"))
    if time_range.start > time_range.end:
        raise ValidationError.single(
            code="invalid_range",
            message="start must not be after end",
            field_name="start",
        )
    return time_range


def resolve_time_range(
    clock: ClockPort,
    period: str,
    start: str | None,
    end: str | None,
) -> TimeRange:
    try:
        return time_range_from(clock, period, start, end)
    except AnalyticsError as e:
        raise to_http_exception(e) from e


def require_owned_website(
    website_id: str,
    user_id: str,
    websites: WebsiteService,
) -> Website:
    try:
        return websites.get_owned(user_id, website_id)
    except AnalyticsError as e:
        raise to_http_exception(e) from e


# --- Routes ---


@router.get("/visits", response_model=VisitSeriesResponse, responses=ERROR_RESPONSES)
def get_visits(
    website_id: str = Query(..., alias="websiteId"),
    period: str = Query("day", description="day, month or year"),
    include_events: bool = Query(False, alias="includeEvents"),
    user_id: str = Depends(get_current_user_id),
    websites: WebsiteService = Depends(get_website_service),
    service: AggregateService = Depends(get_aggregate_service),
) -> VisitSeriesResponse:
    """
    Visit counts for the current day, month or year.

    Buckets are hours, days of the month, or months, always zero-filled.
    """
    website = require_owned_website(website_id, user_id, websites)
    try:
        series = service.get_visit_series(website.id, period, include_events)
    except AnalyticsError as e:
        raise to_http_exception(e) from e
    return VisitSeriesResponse.from_series(series)


@router.get("/summary", response_model=AnalyticsDataResponse, responses=ERROR_RESPONSES)
def get_summary(
    website_id: str = Query(..., alias="websiteId"),
    period: str = Query("7d", description="24h, 7d, 30d or 90d"),
    start: str | None = Query(None, description="ISO datetime; overrides period with end"),
    end: str | None = Query(None, description="ISO datetime; overrides period with start"),
    user_id: str = Depends(get_current_user_id),
    websites: WebsiteService = Depends(get_website_service),
    service: AggregateService = Depends(get_aggregate_service),
    clock: ClockPort = Depends(get_clock),
) -> AnalyticsDataResponse:
    """Full dashboard metrics for a rolling period or an explicit window."""
    website = require_owned_website(website_id, user_id, websites)
    time_range = resolve_time_range(clock, period, start, end)
    try:
        data = service.get_analytics_data(website.id, time_range)
    except AnalyticsError as e:
        raise to_http_exception(e) from e
    return AnalyticsDataResponse.from_data(data, time_range.start, time_range.end)


@router.get("/unique-viewers", response_model=UniqueViewersResponse, responses=ERROR_RESPONSES)
def get_unique_viewers(
    website_id: str = Query(..., alias="websiteId"),
    period: str = Query("7d", description="24h, 7d, 30d or 90d"),
    user_id: str = Depends(get_current_user_id),
    websites: WebsiteService = Depends(get_website_service),
    service: AggregateService = Depends(get_aggregate_service),
    clock: ClockPort = Depends(get_clock),
) -> UniqueViewersResponse:
    """Distinct sessions in a rolling period."""
    website = require_owned_website(website_id, user_id, websites)
    time_range = resolve_time_range(clock, period, None, None)
    try:
        count = service.get_unique_viewers(website.id, time_range)
    except AnalyticsError as e:
        raise to_http_exception(e) from e
    return UniqueViewersResponse(
        unique_viewers=count,
        period=period,
        time_range=TimeRangeModel(start=time_range.start, end=time_range.end),
    )


@router.get("/realtime", response_model=RealtimeResponse, responses=ERROR_RESPONSES)
def get_realtime(
    website_id: str = Query(..., alias="websiteId"),
    user_id: str = Depends(get_current_user_id),
    websites: WebsiteService = Depends(get_website_service),
    service: AggregateService = Depends(get_aggregate_service),
) -> RealtimeResponse:
    """Active and new visitors of the last few minutes."""
    website = require_owned_website(website_id, user_id, websites)
    try:
        data = service.get_realtime_data(website.id)
    except AnalyticsError as e:
        raise to_http_exception(e) from e
    return RealtimeResponse.from_data(data)
