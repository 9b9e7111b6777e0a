from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.components.analytics import AnalyticsData, RealtimeData, VisitSeries
from src.components.websites import WebsiteSummary
from src.core.entities import Event, Website


class CamelModel(BaseModel):
    """Dashboard JSON uses camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Errors ---


class ErrorItem(BaseModel):
    code: str
    message: str
    field: str | None = None


class ErrorResponse(BaseModel):
    ok: bool = False
    message: str
    errors: list[ErrorItem] = []


# --- Events ---


class EventResponse(CamelModel):
    id: UUID
    website_id: UUID
    session_id: str | None
    event_type: str
    event_name: str
    path: str | None = None
    referrer: str | None = None
    screen_width: int | None = None
    screen_height: int | None = None
    country: str | None = None
    city: str | None = None
    created_at: datetime

    @classmethod
    def from_event(cls, event: Event) -> EventResponse:
        return cls.model_validate(event.model_dump(exclude={"ip", "user_agent"}))


class CollectResponse(BaseModel):
    message: str


# --- Visit series ---


class VisitBucketModel(CamelModel):
    label: str
    count: int


class VisitSeriesResponse(CamelModel):
    total_visits: int
    unique_viewers: int
    buckets: list[VisitBucketModel]
    period: str
    include_events: bool

    @classmethod
    def from_series(cls, series: VisitSeries) -> VisitSeriesResponse:
        return cls(
            total_visits=series.total_visits,
            unique_viewers=series.unique_viewers,
            buckets=[VisitBucketModel(label=b.label, count=b.count) for b in series.buckets],
            period=series.period.value,
            include_events=series.include_events,
        )


# --- Full analytics ---


class PageCountModel(CamelModel):
    path: str
    views: int


class ReferrerCountModel(CamelModel):
    referrer: str
    count: int


class DeviceCountModel(CamelModel):
    device: str
    count: int


class DailyViewsModel(CamelModel):
    date: str
    views: int


class TimeRangeModel(CamelModel):
    start: datetime
    end: datetime


class AnalyticsDataResponse(CamelModel):
    total_page_views: int
    unique_visitors: int
    total_events: int
    bounce_rate: float
    average_session_duration: int
    top_pages: list[PageCountModel]
    top_referrers: list[ReferrerCountModel]
    device_breakdown: list[DeviceCountModel]
    daily_page_views: list[DailyViewsModel]
    realtime_visitors: int
    time_range: TimeRangeModel

    @classmethod
    def from_data(cls, data: AnalyticsData, start: datetime, end: datetime) -> AnalyticsDataResponse:
        return cls(
            total_page_views=data.total_page_views,
            unique_visitors=data.unique_visitors,
            total_events=data.total_events,
            bounce_rate=data.bounce_rate,
            average_session_duration=data.average_session_duration,
            top_pages=[PageCountModel(path=p.path, views=p.views) for p in data.top_pages],
            top_referrers=[
                ReferrerCountModel(referrer=r.referrer, count=r.count) for r in data.top_referrers
            ],
            device_breakdown=[
                DeviceCountModel(device=d.device, count=d.count) for d in data.device_breakdown
            ],
            daily_page_views=[
                DailyViewsModel(date=d.date, views=d.views) for d in data.daily_page_views
            ],
            realtime_visitors=data.realtime_visitors,
            time_range=TimeRangeModel(start=start, end=end),
        )


class UniqueViewersResponse(CamelModel):
    unique_viewers: int
    period: str
    time_range: TimeRangeModel


class RealtimeResponse(CamelModel):
    active_visitors: int
    new_visitors: int
    recent_events: list[EventResponse]

    @classmethod
    def from_data(cls, data: RealtimeData) -> RealtimeResponse:
        return cls(
            active_visitors=data.active_visitors,
            new_visitors=data.new_visitors,
            recent_events=[EventResponse.from_event(e) for e in data.recent_events],
        )


# --- Websites ---


class WebsiteCreateRequest(BaseModel):
    name: str | None = None
    domain: str | None = None


class WebsiteResponse(CamelModel):
    id: UUID
    name: str
    domain: str
    user_id: str
    created_at: datetime
    event_count: int | None = None

    @classmethod
    def from_website(cls, website: Website, event_count: int | None = None) -> WebsiteResponse:
        return cls(**website.model_dump(), event_count=event_count)

    @classmethod
    def from_summary(cls, summary: WebsiteSummary) -> WebsiteResponse:
        return cls.from_website(summary.website, summary.event_count)


class ExportResponse(CamelModel):
    website: dict[str, Any]
    exported_at: datetime
    event_count: int
    events: list[EventResponse]
