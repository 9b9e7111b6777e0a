"""
ExportService - Raw event export as CSV or JSON.

Key behaviors:
- Events are returned newest first
- At most max_events rows per export
- start/end are optional inclusive bounds
- CSV quotes every field; missing values are empty strings
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable
from datetime import datetime

from src.components.analytics import ClockPort, EventStorePort, ValidationError
from src.core.entities import Event, Website

from .models import ExportFormat, ExportInput, ExportResult

logger = logging.getLogger(__name__)

CSV_HEADERS = (
    "Date",
    "Event Type",
    "Event Name",
    "Path",
    "Referrer",
    "Screen Width",
    "Screen Height",
    "Session ID",
)

DEFAULT_MAX_EVENTS = 10000


def parse_export_format(value: str | None, allowed: Iterable[str] = ("csv", "json")) -> ExportFormat:
    """Export format from a query parameter; defaults to CSV."""
    raw = (value or ExportFormat.CSV.value).lower()
    if raw not in set(allowed):
        raise ValidationError.single(
            code="invalid_format",
            message=f"Unsupported export format '{value}'",
            field_name="format",
        )
    return ExportFormat(raw)


def _cell(value: object) -> str:
    return "" if value is None else str(value)


def event_to_row(event: Event) -> list[str]:
    return [
        event.created_at.isoformat(),
        event.event_type,
        _cell(event.event_name),
        _cell(event.path),
        _cell(event.referrer),
        _cell(event.screen_width),
        _cell(event.screen_height),
        _cell(event.session_id),
    ]


def render_csv(events: Iterable[Event]) -> str:
    """CSV text with a header row; every field is quoted."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for event in events:
        writer.writerow(event_to_row(event))
    return buf.getvalue()


def export_filename(website: Website, exported_at: datetime, fmt: ExportFormat) -> str:
    return f"{website.domain}-analytics-{exported_at.date().isoformat()}.{fmt.value}"


class ExportService:
    """Selects events of one website for download."""

    def __init__(
        self,
        store: EventStorePort,
        clock: ClockPort,
        max_events: int = DEFAULT_MAX_EVENTS,
    ) -> None:
        self._store = store
        self._clock = clock
        self._max_events = max_events

    def export(self, inp: ExportInput) -> ExportResult:
        """
        Collect events for export.

        Ownership of the website is checked by the caller.

        Raises:
            ValidationError: start is after end.
            StoreUnavailable: Event store failure.
        """
        if inp.start is not None and inp.end is not None and inp.start > inp.end:
            raise ValidationError.single(
                code="invalid_range",
                message="Start date must not be after end date",
                field_name="start_date",
            )

        events = self._store.query(
            inp.website.id,
            start=inp.start,
            end=inp.end,
            order="desc",
            limit=self._max_events,
        )
        exported_at = self._clock.now_utc()
        logger.info(
            "Exported %d events of website %s as %s",
            len(events),
            inp.website.id,
            inp.format.value,
        )

        return ExportResult(
            website=inp.website,
            format=inp.format,
            exported_at=exported_at,
            events=tuple(events),
            filename=export_filename(inp.website, exported_at, inp.format),
        )
