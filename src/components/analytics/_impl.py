"""
AnalyticsIngestionService - Event ingestion with validation.

Handles validation of tracking-snippet payloads and appends one Event per
accepted payload.

Key behaviors:
- website_id, event_type and event_name are required
- Only allowed event types accepted (pageview, custom)
- Screen dimensions must be non-negative 32-bit integers
- Unknown website ids are rejected (NotFoundError)
- created_at comes from the server clock, never from the client
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from src.core.entities import Event

from .models import AnalyticsValidationError, NotFoundError, ValidationError
from .ports import ClockPort, EventStorePort, WebsiteLookupPort

logger = logging.getLogger(__name__)

# Payload keys accepted from the snippet, camelCase and snake_case
FIELD_ALIASES: dict[str, str] = {
    "websiteId": "website_id",
    "sessionId": "session_id",
    "eventType": "event_type",
    "eventName": "event_name",
    "screenWidth": "screen_width",
    "screenHeight": "screen_height",
}

OPTIONAL_STR_FIELDS = ("session_id", "path", "referrer", "country", "city")
OPTIONAL_INT_FIELDS = ("screen_width", "screen_height")

# Upper bound for screen dimensions (signed 32-bit)
MAX_INT_FIELD = 2**31 - 1

# --- Configuration ---


@dataclass(frozen=True)
class IngestionConfig:
    """Analytics ingestion configuration."""

    allowed_event_types: frozenset[str] = field(
        default_factory=lambda: frozenset({"pageview", "custom"}),
    )
    required_fields: tuple[str, ...] = ("website_id", "event_type", "event_name")
    max_path_length: int = 2048


DEFAULT_CONFIG = IngestionConfig()


# --- Default Implementations ---


class InMemoryEventStore:
    """In-memory event store for testing/dev."""

    def __init__(self) -> None:
        self._events: list[Event] = []

    def insert(self, event: Event) -> Event:
        """Append an event."""
        self._events.append(event)
        return event

    def query(
        self,
        website_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        event_type: str | None = None,
        order: Literal["asc", "desc"] = "asc",
        limit: int | None = None,
    ) -> list[Event]:
        """Filter events like the SQL store does (inclusive bounds)."""
        matches = [
            e
            for e in self._events
            if e.website_id == website_id
            and (start is None or e.created_at >= start)
            and (end is None or e.created_at <= end)
            and (event_type is None or e.event_type == event_type)
        ]
        matches.sort(key=lambda e: e.created_at, reverse=(order == "desc"))
        return matches[:limit] if limit is not None else matches

    def get_all(self) -> list[Event]:
        """Get all stored events (for testing)."""
        return list(self._events)


# --- Validation Functions ---


def normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Map camelCase snippet keys onto snake_case field names."""
    return {FIELD_ALIASES.get(k, k): v for k, v in data.items()}


def validate_required_fields(
    data: dict[str, Any],
    config: IngestionConfig = DEFAULT_CONFIG,
) -> list[AnalyticsValidationError]:
    """Required fields must be present and non-empty."""
    errors: list[AnalyticsValidationError] = []

    for field_name in config.required_fields:
        value = data.get(field_name)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(
                AnalyticsValidationError(
                    code="field_required",
                    message=f"Field '{field_name}' is required",
                    field_name=field_name,
                )
            )

    return errors


def validate_event_type(
    event_type: Any,
    config: IngestionConfig = DEFAULT_CONFIG,
) -> list[AnalyticsValidationError]:
    """Event type must be one of the allowed types."""
    if event_type is None:
        # Reported by validate_required_fields
        return []

    if not isinstance(event_type, str) or event_type not in config.allowed_event_types:
        allowed = ", ".join(sorted(config.allowed_event_types))
        return [
            AnalyticsValidationError(
                code="invalid_event_type",
                message=f"Event type '{event_type}' is not allowed (expected one of: {allowed})",
                field_name="event_type",
            )
        ]

    return []


def parse_optional_int(value: Any, field_name: str) -> tuple[int | None, list[AnalyticsValidationError]]:
    """
    Parse an optional non-negative integer field.

    Bools, non-integral values and values above MAX_INT_FIELD are rejected.
    """
    if value is None:
        return None, []

    parsed: int | None = None
    if isinstance(value, int) and not isinstance(value, bool):
        parsed = value
    elif isinstance(value, float) and value.is_integer():
        parsed = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())

    if parsed is not None and 0 <= parsed <= MAX_INT_FIELD:
        return parsed, []

    return None, [
        AnalyticsValidationError(
            code="invalid_integer",
            message=f"Field '{field_name}' must be an integer between 0 and {MAX_INT_FIELD}",
            field_name=field_name,
        )
    ]


def parse_optional_str(value: Any, field_name: str) -> tuple[str | None, list[AnalyticsValidationError]]:
    """Parse an optional string field; empty strings become None."""
    if value is None:
        return None, []

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)

    if not isinstance(value, str):
        return None, [
            AnalyticsValidationError(
                code="invalid_string",
                message=f"Field '{field_name}' must be a string",
                field_name=field_name,
            )
        ]

    return (value or None), []


def parse_forwarded_ip(forwarded_for: str | None, real_ip: str | None = None) -> str:
    """First address of X-Forwarded-For, else X-Real-IP, else 'unknown'."""
    raw = forwarded_for or real_ip or "unknown"
    return raw.split(",")[0].strip() or "unknown"


# --- Analytics Ingestion Service ---


class AnalyticsIngestionService:
    """
    Analytics ingestion service.

    Validates a raw payload and appends it to the event store.
    """

    def __init__(
        self,
        event_store: EventStorePort,
        websites: WebsiteLookupPort,
        clock: ClockPort,
        config: IngestionConfig | None = None,
    ) -> None:
        """Initialize service."""
        self._event_store = event_store
        self._websites = websites
        self._clock = clock
        self._config = config or DEFAULT_CONFIG

    def validate(self, data: dict[str, Any]) -> tuple[dict[str, Any], list[AnalyticsValidationError]]:
        """
        Validate a normalized payload.

        Returns:
            Tuple of (parsed fields, errors). Parsed fields are only
            meaningful when errors is empty.
        """
        errors: list[AnalyticsValidationError] = []
        errors.extend(validate_required_fields(data, self._config))
        errors.extend(validate_event_type(data.get("event_type"), self._config))

        parsed: dict[str, Any] = {}

        for name in OPTIONAL_STR_FIELDS:
            parsed[name], field_errors = parse_optional_str(data.get(name), name)
            errors.extend(field_errors)

        for name in OPTIONAL_INT_FIELDS:
            parsed[name], field_errors = parse_optional_int(data.get(name), name)
            errors.extend(field_errors)

        path = parsed.get("path")
        if path is not None and len(path) > self._config.max_path_length:
            errors.append(
                AnalyticsValidationError(
                    code="path_too_long",
                    message=f"Path exceeds {self._config.max_path_length} characters",
                    field_name="path",
                )
            )

        event_name, name_errors = parse_optional_str(data.get("event_name"), "event_name")
        errors.extend(name_errors)
        parsed["event_name"] = event_name

        return parsed, errors

    def ingest(
        self,
        data: dict[str, Any],
        client_ip: str = "unknown",
        user_agent: str | None = None,
    ) -> Event:
        """
        Ingest an analytics event.

        Raises:
            ValidationError: Missing or malformed fields.
            NotFoundError: website_id does not reference a known website.
            StoreUnavailable: Event store failure.
        """
        data = normalize_keys(data)
        parsed, errors = self.validate(data)

        if errors:
            logger.info(
                "Rejected event for website %s: %s",
                data.get("website_id"),
                ", ".join(e.code for e in errors),
            )
            raise ValidationError(errors)

        website_id = self._resolve_website(str(data["website_id"]))

        event = Event(
            website_id=website_id,
            event_type=data["event_type"],
            user_agent=user_agent,
            ip=client_ip,
            created_at=self._clock.now_utc(),
            **parsed,
        )

        return self._event_store.insert(event)

    def _resolve_website(self, raw_id: str) -> UUID:
        """Known website id or NotFoundError; malformed ids are unknown ids."""
        try:
            website_id = UUID(raw_id)
        except ValueError:
            logger.warning("Event references malformed website id %r", raw_id)
            raise NotFoundError("Invalid website ID", website_id=raw_id) from None

        if self._websites.get_by_id(website_id) is None:
            logger.warning("Event references unknown website %s", website_id)
            raise NotFoundError("Invalid website ID", website_id=raw_id)

        return website_id


# --- Factory ---


def create_analytics_ingestion_service(
    event_store: EventStorePort,
    websites: WebsiteLookupPort,
    clock: ClockPort,
    config: IngestionConfig | None = None,
) -> AnalyticsIngestionService:
    """Create an AnalyticsIngestionService."""
    return AnalyticsIngestionService(
        event_store=event_store,
        websites=websites,
        clock=clock,
        config=config,
    )
