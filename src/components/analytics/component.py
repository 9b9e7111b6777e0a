"""
Analytics component - Event ingestion and aggregation.

Ingests tracking events and answers dashboard queries over them.

Invariants:
- Visit series always has the full bucket set (24 / days in month / 12)
- Visit series total equals the sum of its buckets
- Unique viewers never exceed total visits
- Store failures surface as StoreUnavailable, never as empty data
- created_at is assigned by the server clock
"""

from __future__ import annotations

from src.core.entities import Event
from src.rules.models import Rules

from ._aggregate import AggregateConfig, AggregateService
from ._impl import AnalyticsIngestionService, IngestionConfig
from .models import (
    AnalyticsData,
    AnalyticsDataInput,
    IngestEventInput,
    RealtimeData,
    VisitSeries,
    VisitSeriesInput,
)
from .ports import ClockPort, EventStorePort, WebsiteLookupPort


def build_ingestion_config(rules: Rules | None) -> IngestionConfig:
    """Build ingestion config from rules."""
    if rules is None:
        return IngestionConfig()

    return IngestionConfig(
        allowed_event_types=frozenset(rules.ingest.allowed_event_types),
        required_fields=tuple(rules.ingest.required_fields),
        max_path_length=rules.ingest.max_path_length,
    )


def build_aggregate_config(rules: Rules | None) -> AggregateConfig:
    """Build aggregation config from rules."""
    if rules is None:
        return AggregateConfig()

    agg = rules.aggregation
    return AggregateConfig(
        top_n=agg.top_n,
        mobile_max_width=agg.devices.mobile_max_width,
        tablet_max_width=agg.devices.tablet_max_width,
        realtime_window_seconds=agg.realtime_window_seconds,
        realtime_new_window_seconds=agg.realtime_new_window_seconds,
        realtime_sample_size=agg.realtime_sample_size,
        realtime_recent_events=agg.realtime_recent_events,
    )


# --- Component Entry Points ---


def run_ingest(
    inp: IngestEventInput,
    *,
    event_store: EventStorePort,
    websites: WebsiteLookupPort,
    clock: ClockPort,
    rules: Rules | None = None,
) -> Event:
    """
    Ingest one tracking event.

    Args:
        inp: Raw payload plus request metadata.
        event_store: Event store port.
        websites: Website repository used to reject unknown ids.
        clock: Time port for created_at.
        rules: Optional rules for configuration.

    Returns:
        The stored Event.
    """
    service = AnalyticsIngestionService(
        event_store=event_store,
        websites=websites,
        clock=clock,
        config=build_ingestion_config(rules),
    )
    return service.ingest(inp.data, client_ip=inp.client_ip, user_agent=inp.user_agent)


def run_visit_series(
    inp: VisitSeriesInput,
    *,
    event_store: EventStorePort,
    clock: ClockPort,
    rules: Rules | None = None,
) -> VisitSeries:
    """
    Visit series for the current day, month or year.

    Ownership of the website is not checked here.
    """
    service = AggregateService(store=event_store, clock=clock, config=build_aggregate_config(rules))
    return service.get_visit_series(inp.website_id, inp.period, inp.include_events)


def run_analytics_data(
    inp: AnalyticsDataInput,
    *,
    event_store: EventStorePort,
    clock: ClockPort,
    rules: Rules | None = None,
) -> AnalyticsData:
    """Full dashboard metrics for an explicit time range."""
    service = AggregateService(store=event_store, clock=clock, config=build_aggregate_config(rules))
    return service.get_analytics_data(inp.website_id, inp.time_range)


def run_realtime(
    website_id: str,
    *,
    event_store: EventStorePort,
    clock: ClockPort,
    rules: Rules | None = None,
) -> RealtimeData:
    """Active and new visitors of the last minutes."""
    service = AggregateService(store=event_store, clock=clock, config=build_aggregate_config(rules))
    return service.get_realtime_data(website_id)


def run(
    inp: IngestEventInput | VisitSeriesInput | AnalyticsDataInput,
    *,
    event_store: EventStorePort,
    clock: ClockPort,
    websites: WebsiteLookupPort | None = None,
    rules: Rules | None = None,
) -> Event | VisitSeries | AnalyticsData:
    """
    Main entry point for the analytics component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, IngestEventInput):
        if websites is None:
            raise ValueError("WebsiteLookupPort is required for ingest operations")
        return run_ingest(
            inp,
            event_store=event_store,
            websites=websites,
            clock=clock,
            rules=rules,
        )
    elif isinstance(inp, VisitSeriesInput):
        return run_visit_series(inp, event_store=event_store, clock=clock, rules=rules)
    elif isinstance(inp, AnalyticsDataInput):
        return run_analytics_data(inp, event_store=event_store, clock=clock, rules=rules)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
