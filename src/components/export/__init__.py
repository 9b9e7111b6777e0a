"""
Export component - Raw event download as CSV or JSON.
"""

from ._impl import (
    CSV_HEADERS,
    DEFAULT_MAX_EVENTS,
    ExportService,
    event_to_row,
    export_filename,
    parse_export_format,
    render_csv,
)
from .component import run
from .models import ExportFormat, ExportInput, ExportResult

__all__ = [
    # Entry point
    "run",
    # Models
    "ExportFormat",
    "ExportInput",
    "ExportResult",
    # Service
    "CSV_HEADERS",
    "DEFAULT_MAX_EVENTS",
    "ExportService",
    "event_to_row",
    "export_filename",
    "parse_export_format",
    "render_csv",
]
