"""
Health endpoints.

Key behaviors:
- /health: overall status from all checks (503 when any check fails)
- /health/ready: readiness probe, all checks must pass
- /health/live: liveness probe, always 200 while the process serves requests
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# --- Types ---


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str = ""
    latency_ms: float = 0.0


class HealthCheck(Protocol):
    name: str

    def check(self) -> CheckResult:
        ...


# --- Startup Tracker ---


class StartupTracker:
    """Tracks application startup time for uptime calculation."""

    _start_time: float | None = None

    @classmethod
    def mark_started(cls) -> None:
        cls._start_time = time.time()

    @classmethod
    def get_uptime_seconds(cls) -> float:
        if cls._start_time is None:
            return 0.0
        return time.time() - cls._start_time


# --- Built-in Checks ---


class DatabaseCheck:
    """Runs a probe function against the event store."""

    name = "database"

    def __init__(self, probe: Callable[[], object]) -> None:
        self._probe = probe

    def check(self) -> CheckResult:
        start = time.time()
        try:
            self._probe()
        except Exception as e:
            logger.warning("Database health check failed: %s", e)
            return CheckResult(
                name=self.name,
                status=HealthStatus.UNHEALTHY,
                message=f"Database error: {e!s}",
                latency_ms=(time.time() - start) * 1000,
            )
        return CheckResult(
            name=self.name,
            status=HealthStatus.HEALTHY,
            message="Database connected",
            latency_ms=(time.time() - start) * 1000,
        )


# --- FastAPI Router ---


def create_health_router(version: str = "0.0.0", checks: list[HealthCheck] | None = None) -> APIRouter:
    """
    Create FastAPI router for health endpoints.

    Args:
        version: Application version string
        checks: Dependency checks run by /health and /health/ready
    """
    router = APIRouter(tags=["health"])
    registered = list(checks or [])

    def run_all() -> list[CheckResult]:
        return [c.check() for c in registered]

    @router.get("/health", response_model=None)
    def health_check() -> JSONResponse:
        results = run_all()
        healthy = all(r.status == HealthStatus.HEALTHY for r in results)
        overall = HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY

        return JSONResponse(
            content={
                "status": overall.value,
                "version": version,
                "uptime_seconds": StartupTracker.get_uptime_seconds(),
                "checks": [
                    {
                        "name": r.name,
                        "status": r.status.value,
                        "message": r.message,
                        "latency_ms": r.latency_ms,
                    }
                    for r in results
                ],
            },
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    @router.get("/health/ready", response_model=None)
    def readiness_check() -> JSONResponse:
        results = run_all()
        is_ready = all(r.status == HealthStatus.HEALTHY for r in results)
        return JSONResponse(
            content={
                "ready": is_ready,
                "checks": [
                    {"name": r.name, "status": r.status.value, "message": r.message} for r in results
                ],
            },
            status_code=status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    @router.get("/health/live", response_model=None)
    def liveness_check() -> JSONResponse:
        return JSONResponse(
            content={"alive": True, "uptime_seconds": StartupTracker.get_uptime_seconds()},
            status_code=status.HTTP_200_OK,
        )

    return router
