import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteEventStore, SQLiteWebsiteRepo
from src.components.analytics import (
    AggregateService,
    AnalyticsIngestionService,
    ClockPort,
    EventStorePort,
    build_aggregate_config,
    build_ingestion_config,
)
from src.components.export import ExportService
from src.components.websites import WebsiteRepoPort, WebsiteService
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("ANALYTICS_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "analytics.db")
        self.rules_path = Path(os.environ.get("ANALYTICS_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = self.base_dir / "migrations"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Adapters ---
# One store handle per process; each call opens its own connection.
@lru_cache
def get_event_store() -> EventStorePort:
    return SQLiteEventStore(get_settings().db_path)


@lru_cache
def get_website_repo() -> WebsiteRepoPort:
    return SQLiteWebsiteRepo(get_settings().db_path)


@lru_cache
def get_clock() -> ClockPort:
    """Clock in the configured aggregation zone (server local when unset)."""
    return SystemClock(get_rules().aggregation.timezone)


# --- Component Services ---
def get_aggregate_service(
    store: EventStorePort = Depends(get_event_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> AggregateService:
    """Get aggregation component service."""
    return AggregateService(store=store, clock=clock, config=build_aggregate_config(rules))


def get_ingestion_service(
    store: EventStorePort = Depends(get_event_store),
    websites: WebsiteRepoPort = Depends(get_website_repo),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> AnalyticsIngestionService:
    """Get ingestion component service."""
    return AnalyticsIngestionService(
        event_store=store,
        websites=websites,
        clock=clock,
        config=build_ingestion_config(rules),
    )


def get_website_service(repo: WebsiteRepoPort = Depends(get_website_repo)) -> WebsiteService:
    """Get websites component service."""
    return WebsiteService(repo=repo)


def get_export_service(
    store: EventStorePort = Depends(get_event_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> ExportService:
    """Get export component service."""
    return ExportService(store=store, clock=clock, max_events=rules.export.max_events)


# --- Auth ---
def get_current_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """
    Calling user's id.

    Sessions are handled by the fronting auth service, which forwards the
    authenticated user as X-User-Id.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return x_user_id.strip()
