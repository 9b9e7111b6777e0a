"""
Export component - Raw event download.

Shell Layer - builds the service from injected ports.
"""

from __future__ import annotations

from src.components.analytics import ClockPort, EventStorePort
from src.rules.models import Rules

from ._impl import DEFAULT_MAX_EVENTS, ExportService
from .models import ExportInput, ExportResult


def run(
    inp: ExportInput,
    *,
    event_store: EventStorePort,
    clock: ClockPort,
    rules: Rules | None = None,
) -> ExportResult:
    """Events of an owned website, newest first, capped by the export rules."""
    max_events = rules.export.max_events if rules is not None else DEFAULT_MAX_EVENTS
    return ExportService(store=event_store, clock=clock, max_events=max_events).export(inp)
