"""
Tests for the dashboard analytics API.
"""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.api import deps
from src.components.analytics import InMemoryEventStore, StoreUnavailable
from src.core.entities import Event, Website

# --- Helper Functions ---


class DownEventStore(InMemoryEventStore):
    def query(self, website_id, **kwargs) -> list[Event]:
        raise StoreUnavailable("Event store unavailable")


def record_event(
    store: InMemoryEventStore,
    website: Website,
    created_at,
    session_id: str = "s1",
    event_type: str = "pageview",
    path: str = "/",
    referrer: str | None = None,
    screen_width: int | None = None,
) -> Event:
    return store.insert(
        Event(
            website_id=website.id,
            session_id=session_id,
            event_type=event_type,
            event_name=event_type,
            path=path,
            referrer=referrer,
            screen_width=screen_width,
            created_at=created_at,
        )
    )


# --- Tests ---


class TestAuth:
    """Caller identity and website ownership."""

    def test_missing_user_header(self, client: TestClient, website: Website) -> None:
        response = client.get("/api/analytics/visits", params={"websiteId": str(website.id)})
        assert response.status_code == 401

    def test_other_users_website_is_not_found(self, client: TestClient, website: Website) -> None:
        response = client.get(
            "/api/analytics/visits",
            params={"websiteId": str(website.id)},
            headers={"X-User-Id": "user-2"},
        )
        assert response.status_code == 404

    def test_unknown_website(self, client: TestClient, owner_headers) -> None:
        response = client.get(
            "/api/analytics/summary", params={"websiteId": str(uuid4())}, headers=owner_headers
        )
        assert response.status_code == 404

    def test_malformed_website_id(self, client: TestClient, owner_headers) -> None:
        response = client.get(
            "/api/analytics/realtime", params={"websiteId": "nope"}, headers=owner_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["code"] == "invalid_website_id"


class TestVisitsEndpoint:
    """Tests for GET /api/analytics/visits."""

    def test_empty_day(self, client: TestClient, website: Website, owner_headers) -> None:
        response = client.get(
            "/api/analytics/visits", params={"websiteId": str(website.id)}, headers=owner_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["totalVisits"] == 0
        assert data["uniqueViewers"] == 0
        assert data["period"] == "day"
        assert data["includeEvents"] is False
        assert len(data["buckets"]) == 24
        assert all(b["count"] == 0 for b in data["buckets"])

    def test_counts_page_views_by_hour(
        self,
        client: TestClient,
        website: Website,
        event_store: InMemoryEventStore,
        clock,
        owner_headers,
    ) -> None:
        today = clock.now_local().replace(minute=0, second=0, microsecond=0)
        record_event(event_store, website, today.replace(hour=9), session_id="a")
        record_event(event_store, website, today.replace(hour=9), session_id="b")
        record_event(event_store, website, today.replace(hour=10), session_id="a", event_type="custom")

        response = client.get(
            "/api/analytics/visits",
            params={"websiteId": str(website.id), "period": "day"},
            headers=owner_headers,
        )
        data = response.json()
        buckets = {b["label"]: b["count"] for b in data["buckets"]}

        assert data["totalVisits"] == 2
        assert data["uniqueViewers"] == 2
        assert buckets["09"] == 2
        assert buckets["10"] == 0

        with_events = client.get(
            "/api/analytics/visits",
            params={"websiteId": str(website.id), "includeEvents": "true"},
            headers=owner_headers,
        ).json()
        assert with_events["totalVisits"] == 3
        assert with_events["includeEvents"] is True

    @pytest.mark.parametrize(("period", "size"), [("month", 30), ("year", 12)])
    def test_bucket_layout(
        self, client: TestClient, website: Website, owner_headers, period: str, size: int
    ) -> None:
        # The test clock is in June
        response = client.get(
            "/api/analytics/visits",
            params={"websiteId": str(website.id), "period": period},
            headers=owner_headers,
        )
        assert response.status_code == 200
        assert len(response.json()["buckets"]) == size

    def test_invalid_period(self, client: TestClient, website: Website, owner_headers) -> None:
        response = client.get(
            "/api/analytics/visits",
            params={"websiteId": str(website.id), "period": "week"},
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["code"] == "invalid_period"

    def test_store_down(self, app, client: TestClient, website: Website, owner_headers) -> None:
        app.dependency_overrides[deps.get_event_store] = lambda: DownEventStore()

        response = client.get(
            "/api/analytics/visits", params={"websiteId": str(website.id)}, headers=owner_headers
        )
        assert response.status_code == 503


class TestSummaryEndpoint:
    """Tests for GET /api/analytics/summary."""

    def test_default_week(
        self,
        client: TestClient,
        website: Website,
        event_store: InMemoryEventStore,
        clock,
        owner_headers,
    ) -> None:
        now = clock.now_utc()
        record_event(event_store, website, now - timedelta(days=10), session_id="old")
        record_event(
            event_store,
            website,
            now - timedelta(days=1),
            session_id="a",
            path="/a",
            referrer="https://ref.example/x",
            screen_width=390,
        )
        record_event(event_store, website, now - timedelta(days=1, seconds=-40), session_id="a", path="/b")
        record_event(event_store, website, now - timedelta(minutes=1), session_id="b", path="/a")

        response = client.get(
            "/api/analytics/summary", params={"websiteId": str(website.id)}, headers=owner_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["totalPageViews"] == 3
        assert data["uniqueVisitors"] == 2
        assert data["totalEvents"] == 3
        assert data["bounceRate"] == 50.0
        assert data["averageSessionDuration"] == 20
        assert data["topPages"][0] == {"path": "/a", "views": 2}
        assert data["topReferrers"] == [{"referrer": "ref.example", "count": 1}]
        assert data["deviceBreakdown"] == [{"device": "Mobile", "count": 1}]
        assert data["realtimeVisitors"] == 1
        assert "start" in data["timeRange"]

    def test_explicit_range(
        self,
        client: TestClient,
        website: Website,
        event_store: InMemoryEventStore,
        clock,
        owner_headers,
    ) -> None:
        now = clock.now_utc()
        record_event(event_store, website, now - timedelta(days=40))
        record_event(event_store, website, now - timedelta(days=2))

        response = client.get(
            "/api/analytics/summary",
            params={
                "websiteId": str(website.id),
                "start": (now - timedelta(days=45)).isoformat(),
                "end": (now - timedelta(days=30)).isoformat(),
            },
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["totalEvents"] == 1

    def test_bad_datetime(self, client: TestClient, website: Website, owner_headers) -> None:
        response = client.get(
            "/api/analytics/summary",
            params={"websiteId": str(website.id), "start": "yesterday", "end": "today"},
            headers=owner_headers,
        )
        assert response.status_code == 400
        body = response.json()["detail"]
        assert body["ok"] is False
        assert [(e["code"], e["field"]) for e in body["errors"]] == [("invalid_datetime", "start")]

    def test_start_after_end(
        self, client: TestClient, website: Website, clock, owner_headers
    ) -> None:
        now = clock.now_utc()
        response = client.get(
            "/api/analytics/summary",
            params={
                "websiteId": str(website.id),
                "start": now.isoformat(),
                "end": (now - timedelta(days=1)).isoformat(),
            },
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["code"] == "invalid_range"

    @pytest.mark.parametrize("bound", ["start", "end"])
    def test_single_bound_rejected(
        self, client: TestClient, website: Website, clock, owner_headers, bound: str
    ) -> None:
        response = client.get(
            "/api/analytics/summary",
            params={"websiteId": str(website.id), bound: clock.now_utc().isoformat()},
            headers=owner_headers,
        )
        assert response.status_code == 400
        body = response.json()["detail"]
        assert body["ok"] is False
        assert body["errors"][0]["code"] == "incomplete_range"

    def test_invalid_range_period(self, client: TestClient, website: Website, owner_headers) -> None:
        response = client.get(
            "/api/analytics/summary",
            params={"websiteId": str(website.id), "period": "1y"},
            headers=owner_headers,
        )
        assert response.status_code == 400


class TestUniqueViewersEndpoint:
    """Tests for GET /api/analytics/unique-viewers."""

    def test_counts_sessions(
        self,
        client: TestClient,
        website: Website,
        event_store: InMemoryEventStore,
        clock,
        owner_headers,
    ) -> None:
        now = clock.now_utc()
        record_event(event_store, website, now - timedelta(hours=1), session_id="a")
        record_event(event_store, website, now - timedelta(hours=2), session_id="a")
        record_event(event_store, website, now - timedelta(hours=30), session_id="b")

        response = client.get(
            "/api/analytics/unique-viewers",
            params={"websiteId": str(website.id), "period": "24h"},
            headers=owner_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["uniqueViewers"] == 1
        assert data["period"] == "24h"


class TestRealtimeEndpoint:
    """Tests for GET /api/analytics/realtime."""

    def test_recent_activity(
        self,
        client: TestClient,
        website: Website,
        event_store: InMemoryEventStore,
        clock,
        owner_headers,
    ) -> None:
        now = clock.now_utc()
        record_event(event_store, website, now - timedelta(minutes=3), session_id="a", path="/x")
        record_event(event_store, website, now - timedelta(seconds=20), session_id="b", path="/y")

        response = client.get(
            "/api/analytics/realtime", params={"websiteId": str(website.id)}, headers=owner_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["activeVisitors"] == 2
        assert data["newVisitors"] == 1
        assert [e["path"] for e in data["recentEvents"]] == ["/y", "/x"]
        assert "ip" not in data["recentEvents"][0]
