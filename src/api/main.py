import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteEventStore
from src.api.cors import DashboardCORSMiddleware
from src.api.deps import get_rules, get_settings
from src.api.routes import admin_analytics, analytics_ingest, export, websites
from src.shell.http.health import DatabaseCheck, StartupTracker, create_health_router

API_VERSION = "0.1.0"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Schema must be current before the first request (fail-fast)
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
        logger.info("Database ready at %s (%d migrations applied)", settings.db_path, len(applied))
    except Exception:
        logger.critical("Database setup failed for %s", settings.db_path, exc_info=True)
        sys.exit(1)

    StartupTracker.mark_started()
    yield
    # Shutdown cleanup if needed


def create_app() -> FastAPI:
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = get_rules()
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception:
        logger.critical("Rules load failed from %s", settings.rules_path, exc_info=True)
        sys.exit(1)

    app = FastAPI(
        title="Site Analytics API",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # --- Routers ---
    app.include_router(analytics_ingest.router, prefix="/api", tags=["Collect"])
    app.include_router(admin_analytics.router, prefix="/api/analytics", tags=["Analytics"])
    app.include_router(export.router, prefix="/api", tags=["Export"])
    app.include_router(websites.router, prefix="/api/websites", tags=["Websites"])
    app.include_router(
        create_health_router(
            version=API_VERSION,
            checks=[DatabaseCheck(SQLiteEventStore(settings.db_path).ping)],
        )
    )

    # CORS (Allow Dashboard); the collect endpoint answers any origin itself
    app.add_middleware(
        DashboardCORSMiddleware,
        public_paths=[f"/api{analytics_ingest.COLLECT_PATH}"],
        allow_origins=rules.cors.dashboard_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


app = create_app()
