"""
Websites API.

Registration and listing of the calling user's tracked websites.
"""

from fastapi import APIRouter, Depends, status

from src.api.deps import get_current_user_id, get_website_service
from src.api.errors import to_http_exception
from src.api.schemas import ErrorResponse, WebsiteCreateRequest, WebsiteResponse
from src.components.analytics import AnalyticsError
from src.components.websites import WebsiteService

router = APIRouter()


@router.post(
    "",
    response_model=WebsiteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def create_website(
    body: WebsiteCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: WebsiteService = Depends(get_website_service),
) -> WebsiteResponse:
    """Register a website; the snippet then posts events with its id."""
    try:
        website = service.create(user_id, body.name or "", body.domain or "")
    except AnalyticsError as e:
        raise to_http_exception(e) from e
    return WebsiteResponse.from_website(website, event_count=0)


@router.get("", response_model=list[WebsiteResponse])
def list_websites(
    user_id: str = Depends(get_current_user_id),
    service: WebsiteService = Depends(get_website_service),
) -> list[WebsiteResponse]:
    """The caller's websites, newest first, with event counts."""
    try:
        summaries = service.list_for_user(user_id)
    except AnalyticsError as e:
        raise to_http_exception(e) from e
    return [WebsiteResponse.from_summary(s) for s in summaries]
