"""
Analytics Ingestion API Routes.

Public endpoint the tracking snippet posts to. Any origin may call it, so
the route sets its own CORS headers; the dashboard CORS middleware skips
this path.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse, Response

from src.api.deps import get_ingestion_service
from src.api.errors import error_body, status_for
from src.api.schemas import CollectResponse, ErrorResponse
from src.components.analytics import (
    AnalyticsError,
    AnalyticsIngestionService,
    parse_forwarded_ip,
)

router = APIRouter()

COLLECT_PATH = "/collect"

COLLECT_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def get_client_ip(request: Request) -> str:
    """Client address as reported by the fronting proxy."""
    return parse_forwarded_ip(
        request.headers.get("x-forwarded-for"),
        request.headers.get("x-real-ip"),
    )


# --- Routes ---


@router.options(COLLECT_PATH)
def collect_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=COLLECT_CORS_HEADERS)


@router.post(
    COLLECT_PATH,
    status_code=status.HTTP_202_ACCEPTED,
    response_model=CollectResponse,
    responses={
        400: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def collect_event(
    request: Request,
    payload: dict[str, Any] = Body(...),
    service: AnalyticsIngestionService = Depends(get_ingestion_service),
) -> JSONResponse:
    """
    Record one tracking event.

    Accepts camelCase or snake_case keys. Unknown or malformed website ids
    are reported as 400, like any other bad payload.
    """
    try:
        service.ingest(
            payload,
            client_ip=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except AnalyticsError as e:
        return JSONResponse(
            status_code=status_for(e, not_found_status=status.HTTP_400_BAD_REQUEST),
            content=error_body(e),
            headers=COLLECT_CORS_HEADERS,
        )

    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content={"message": "Event received"},
        headers=COLLECT_CORS_HEADERS,
    )
