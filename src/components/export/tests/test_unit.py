"""
Export component unit tests.
"""

from __future__ import annotations

import csv
import io
from datetime import UTC, datetime, timedelta

import pytest

from src.components.analytics import InMemoryEventStore, ValidationError
from src.components.export import (
    CSV_HEADERS,
    ExportFormat,
    ExportInput,
    ExportService,
    parse_export_format,
    render_csv,
    run,
)
from src.core.entities import Event, Website

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


class MockClock:
    def now_utc(self) -> datetime:
        return NOW

    def now_local(self) -> datetime:
        return NOW


@pytest.fixture
def website() -> Website:
    return Website(name="Blog", domain="blog.example.com", user_id="user-1")


@pytest.fixture
def store(website: Website) -> InMemoryEventStore:
    store = InMemoryEventStore()
    for i in range(5):
        store.insert(
            Event(
                website_id=website.id,
                session_id=f"s{i}",
                event_type="pageview",
                event_name="pageview",
                path=f"/p{i}",
                created_at=NOW - timedelta(hours=i),
            )
        )
    return store


class TestExportService:
    """Test event selection."""

    def test_newest_first(self, store, website) -> None:
        result = ExportService(store, MockClock()).export(ExportInput(website=website))

        assert [e.path for e in result.events] == ["/p0", "/p1", "/p2", "/p3", "/p4"]
        assert result.event_count == 5
        assert result.filename == "blog.example.com-analytics-2024-06-15.csv"

    def test_capped_at_max_events(self, store, website) -> None:
        result = ExportService(store, MockClock(), max_events=2).export(ExportInput(website=website))
        assert [e.path for e in result.events] == ["/p0", "/p1"]

    def test_inclusive_date_bounds(self, store, website) -> None:
        inp = ExportInput(
            website=website,
            format=ExportFormat.JSON,
            start=NOW - timedelta(hours=3),
            end=NOW - timedelta(hours=1),
        )
        result = run(inp, event_store=store, clock=MockClock())

        assert [e.path for e in result.events] == ["/p1", "/p2", "/p3"]
        assert result.filename.endswith(".json")

    def test_start_after_end_rejected(self, store, website) -> None:
        inp = ExportInput(website=website, start=NOW, end=NOW - timedelta(days=1))
        with pytest.raises(ValidationError) as exc_info:
            ExportService(store, MockClock()).export(inp)
        assert exc_info.value.errors[0].code == "invalid_range"


class TestRenderCsv:
    """Test CSV rendering."""

    def test_header_and_quoted_rows(self, website) -> None:
        event = Event(
            website_id=website.id,
            session_id=None,
            event_type="custom",
            event_name='say "hi"',
            screen_width=1280,
            created_at=NOW,
        )
        text = render_csv([event])
        lines = text.splitlines()

        assert lines[0] == ",".join(f'"{h}"' for h in CSV_HEADERS)
        assert lines[1].startswith('"2024-06-15T12:00:00+00:00","custom","say ""hi""",')

        rows = list(csv.reader(io.StringIO(text)))
        assert rows[1][2] == 'say "hi"'
        assert rows[1][5] == "1280"
        assert rows[1][6] == ""
        assert rows[1][7] == ""

    def test_empty_export_has_header_only(self) -> None:
        assert render_csv([]).splitlines() == [",".join(f'"{h}"' for h in CSV_HEADERS)]


class TestParseExportFormat:
    def test_default_is_csv(self) -> None:
        assert parse_export_format(None) == ExportFormat.CSV

    def test_case_insensitive(self) -> None:
        assert parse_export_format("JSON") == ExportFormat.JSON

    def test_unknown_format(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_export_format("xml")
        assert exc_info.value.errors[0].code == "invalid_format"
