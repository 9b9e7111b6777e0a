"""
Analytics component - Event ingestion and aggregation.
"""

from ._aggregate import (
    AggregateConfig,
    AggregateService,
    bucket_events,
    build_visit_series,
    classify_device,
    compute_analytics_data,
    create_aggregate_service,
    distinct_sessions,
    parse_website_id,
    referrer_hostname,
    round_half_up,
    top_n,
)
from ._impl import (
    AnalyticsIngestionService,
    IngestionConfig,
    InMemoryEventStore,
    create_analytics_ingestion_service,
    normalize_keys,
    parse_forwarded_ip,
    parse_optional_int,
    validate_event_type,
    validate_required_fields,
)
from ._period import (
    bucket_spec_for,
    days_in_month,
    get_time_range,
    parse_period,
    period_start,
    resolve_period,
)
from .component import (
    build_aggregate_config,
    build_ingestion_config,
    run,
    run_analytics_data,
    run_ingest,
    run_realtime,
    run_visit_series,
)
from .models import (
    RANGE_PERIODS,
    AnalyticsData,
    AnalyticsDataInput,
    AnalyticsError,
    AnalyticsValidationError,
    BucketKind,
    BucketSpec,
    DailyViews,
    DeviceCount,
    IngestEventInput,
    NotFoundError,
    PageCount,
    Period,
    RealtimeData,
    ReferrerCount,
    ResolvedPeriod,
    StoreUnavailable,
    TimeRange,
    ValidationError,
    VisitBucket,
    VisitSeries,
    VisitSeriesInput,
)
from .ports import ClockPort, EventStorePort, WebsiteLookupPort

__all__ = [
    # Entry points
    "run",
    "run_analytics_data",
    "run_ingest",
    "run_realtime",
    "run_visit_series",
    "build_aggregate_config",
    "build_ingestion_config",
    # Input models
    "AnalyticsDataInput",
    "IngestEventInput",
    "VisitSeriesInput",
    # Output models
    "AnalyticsData",
    "DailyViews",
    "DeviceCount",
    "PageCount",
    "RealtimeData",
    "ReferrerCount",
    "VisitBucket",
    "VisitSeries",
    # Periods
    "RANGE_PERIODS",
    "BucketKind",
    "BucketSpec",
    "Period",
    "ResolvedPeriod",
    "TimeRange",
    "bucket_spec_for",
    "days_in_month",
    "get_time_range",
    "parse_period",
    "period_start",
    "resolve_period",
    # Errors
    "AnalyticsError",
    "AnalyticsValidationError",
    "NotFoundError",
    "StoreUnavailable",
    "ValidationError",
    # Ports
    "ClockPort",
    "EventStorePort",
    "WebsiteLookupPort",
    # Aggregation
    "AggregateConfig",
    "AggregateService",
    "bucket_events",
    "build_visit_series",
    "classify_device",
    "compute_analytics_data",
    "create_aggregate_service",
    "distinct_sessions",
    "parse_website_id",
    "referrer_hostname",
    "round_half_up",
    "top_n",
    # Ingestion
    "AnalyticsIngestionService",
    "IngestionConfig",
    "InMemoryEventStore",
    "create_analytics_ingestion_service",
    "normalize_keys",
    "parse_forwarded_ip",
    "parse_optional_int",
    "validate_event_type",
    "validate_required_fields",
]
