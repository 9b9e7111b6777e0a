"""
Event Export API.

Downloads the raw events of an owned website as CSV or JSON.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from src.api.deps import get_current_user_id, get_export_service, get_rules, get_website_service
from src.api.errors import to_http_exception
from src.api.routes.admin_analytics import ERROR_RESPONSES, parse_datetime, require_owned_website
from src.api.schemas import EventResponse, ExportResponse
from src.components.analytics import AnalyticsError
from src.components.export import (
    ExportFormat,
    ExportInput,
    ExportService,
    parse_export_format,
    render_csv,
)
from src.components.websites import WebsiteService
from src.rules.models import Rules

router = APIRouter()


@router.get(
    "/export",
    response_model=ExportResponse,
    responses={**ERROR_RESPONSES, 200: {"content": {"text/csv": {}}}},
)
def export_events(
    website_id: str = Query(..., alias="websiteId"),
    export_format: str = Query("csv", alias="format", description="csv or json"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    websites: WebsiteService = Depends(get_website_service),
    service: ExportService = Depends(get_export_service),
    rules: Rules = Depends(get_rules),
) -> Response | ExportResponse:
    """
    Export events newest first.

    startDate and endDate are optional inclusive bounds.
    """
    website = require_owned_website(website_id, user_id, websites)

    try:
        start = parse_datetime(start_date, "startDate") if start_date else None
        end = parse_datetime(end_date, "endDate") if end_date else None
        fmt = parse_export_format(export_format, rules.export.formats)
        result = service.export(ExportInput(website=website, format=fmt, start=start, end=end))
    except AnalyticsError as e:
        raise to_http_exception(e) from e

    if result.format == ExportFormat.CSV:
        return Response(
            content=render_csv(result.events),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
        )

    return ExportResponse(
        website={"id": str(website.id), "name": website.name, "domain": website.domain},
        exported_at=result.exported_at,
        event_count=result.event_count,
        events=[EventResponse.from_event(e) for e in result.events],
    )
