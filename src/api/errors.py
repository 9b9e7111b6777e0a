"""
Mapping of analytics errors onto HTTP responses.

- ValidationError -> 400 with the list of field errors
- NotFoundError -> 404 (400 where the caller asks, e.g. ingestion)
- StoreUnavailable -> 503
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from src.components.analytics import (
    AnalyticsError,
    NotFoundError,
    StoreUnavailable,
    ValidationError,
)


def error_body(exc: AnalyticsError) -> dict[str, Any]:
    errors = [e.to_dict() for e in exc.errors] if isinstance(exc, ValidationError) else []
    return {"ok": False, "message": str(exc), "errors": errors}


def status_for(exc: AnalyticsError, not_found_status: int = status.HTTP_404_NOT_FOUND) -> int:
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFoundError):
        return not_found_status
    if isinstance(exc, StoreUnavailable):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(
    exc: AnalyticsError,
    not_found_status: int = status.HTTP_404_NOT_FOUND,
) -> HTTPException:
    """HTTPException carrying the error body as detail."""
    return HTTPException(status_code=status_for(exc, not_found_status), detail=error_body(exc))
