"""
Tests for the websites and export APIs.
"""

from __future__ import annotations

import csv
import io
from datetime import timedelta

from fastapi.testclient import TestClient

from src.components.analytics import InMemoryEventStore
from src.core.entities import Event, Website


def record_events(store: InMemoryEventStore, website: Website, now, count: int) -> None:
    for i in range(count):
        store.insert(
            Event(
                website_id=website.id,
                session_id=f"s{i}",
                event_type="pageview",
                event_name="pageview",
                path=f"/p{i}",
                created_at=now - timedelta(hours=i),
            )
        )


class TestWebsitesEndpoint:
    """Tests for /api/websites."""

    def test_create(self, client: TestClient, owner_headers) -> None:
        response = client.post(
            "/api/websites",
            json={"name": "Shop", "domain": "Shop.Example.com"},
            headers=owner_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Shop"
        assert data["domain"] == "shop.example.com"
        assert data["userId"] == "user-1"
        assert data["eventCount"] == 0

    def test_create_requires_fields(self, client: TestClient, owner_headers) -> None:
        response = client.post("/api/websites", json={"name": "Shop"}, headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["code"] == "domain_required"

    def test_create_requires_user(self, client: TestClient) -> None:
        response = client.post("/api/websites", json={"name": "Shop", "domain": "shop.example"})
        assert response.status_code == 401

    def test_list_own_websites(
        self,
        client: TestClient,
        website: Website,
        event_store: InMemoryEventStore,
        clock,
        owner_headers,
    ) -> None:
        record_events(event_store, website, clock.now_utc(), 3)

        response = client.get("/api/websites", headers=owner_headers)

        assert response.status_code == 200
        [item] = response.json()
        assert item["id"] == str(website.id)
        assert item["eventCount"] == 3

        assert client.get("/api/websites", headers={"X-User-Id": "user-2"}).json() == []


class TestExportEndpoint:
    """Tests for GET /api/export."""

    def test_csv(
        self,
        client: TestClient,
        website: Website,
        event_store: InMemoryEventStore,
        clock,
        owner_headers,
    ) -> None:
        record_events(event_store, website, clock.now_utc(), 3)

        response = client.get(
            "/api/export", params={"websiteId": str(website.id)}, headers=owner_headers
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert (
            'filename="blog.example.com-analytics-2024-06-15.csv"'
            in response.headers["content-disposition"]
        )
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0][0] == "Date"
        assert [r[3] for r in rows[1:]] == ["/p0", "/p1", "/p2"]

    def test_json_with_date_filter(
        self,
        client: TestClient,
        website: Website,
        event_store: InMemoryEventStore,
        clock,
        owner_headers,
    ) -> None:
        now = clock.now_utc()
        record_events(event_store, website, now, 5)

        response = client.get(
            "/api/export",
            params={
                "websiteId": str(website.id),
                "format": "json",
                "startDate": (now - timedelta(hours=2)).isoformat(),
            },
            headers=owner_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["website"]["domain"] == "blog.example.com"
        assert data["eventCount"] == 3
        assert [e["path"] for e in data["events"]] == ["/p0", "/p1", "/p2"]
        assert "exportedAt" in data

    def test_unknown_format(self, client: TestClient, website: Website, owner_headers) -> None:
        response = client.get(
            "/api/export",
            params={"websiteId": str(website.id), "format": "xml"},
            headers=owner_headers,
        )
        assert response.status_code == 400

    def test_bad_start_date(self, client: TestClient, website: Website, owner_headers) -> None:
        response = client.get(
            "/api/export",
            params={"websiteId": str(website.id), "startDate": "last week"},
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0] == {
            "code": "invalid_datetime",
            "message": "Invalid datetime format: last week",
            "field": "startDate",
        }

    def test_other_users_website(self, client: TestClient, website: Website) -> None:
        response = client.get(
            "/api/export", params={"websiteId": str(website.id)}, headers={"X-User-Id": "user-2"}
        )
        assert response.status_code == 404
