"""
Shared setup for API tests: in-memory stores behind the real routers.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api import deps
from src.api.routes import admin_analytics, analytics_ingest, export, websites
from src.components.analytics import InMemoryEventStore
from src.components.websites import InMemoryWebsiteRepo
from src.core.entities import Website

OWNER = "user-1"
OTHER = "user-2"


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def website_repo(event_store: InMemoryEventStore) -> InMemoryWebsiteRepo:
    return InMemoryWebsiteRepo(event_store)


@pytest.fixture
def website(website_repo: InMemoryWebsiteRepo) -> Website:
    return website_repo.save(Website(name="Blog", domain="blog.example.com", user_id=OWNER))


@pytest.fixture
def app(event_store, website_repo, clock, rules) -> FastAPI:
    """Test FastAPI app with all API routers."""
    app = FastAPI()
    app.include_router(analytics_ingest.router, prefix="/api")
    app.include_router(admin_analytics.router, prefix="/api/analytics")
    app.include_router(export.router, prefix="/api")
    app.include_router(websites.router, prefix="/api/websites")

    # Override dependencies
    app.dependency_overrides[deps.get_event_store] = lambda: event_store
    app.dependency_overrides[deps.get_website_repo] = lambda: website_repo
    app.dependency_overrides[deps.get_clock] = lambda: clock
    app.dependency_overrides[deps.get_rules] = lambda: rules

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client."""
    return TestClient(app)


@pytest.fixture
def owner_headers() -> dict[str, str]:
    return {"X-User-Id": OWNER}
