"""
Export component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from src.core.entities import Event, Website


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


@dataclass(frozen=True)
class ExportInput:
    """Input for exporting a website's raw events."""

    website: Website
    format: ExportFormat = ExportFormat.CSV
    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True)
class ExportResult:
    """Events selected for export, newest first."""

    website: Website
    format: ExportFormat
    exported_at: datetime
    events: tuple[Event, ...]
    filename: str

    @property
    def event_count(self) -> int:
        return len(self.events)
