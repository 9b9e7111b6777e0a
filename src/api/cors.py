"""
CORS for the dashboard API.

The dashboard is served from a fixed set of origins, while the tracking
snippet posts from any site. Public paths bypass the origin check and set
their own headers.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class DashboardCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that leaves the given paths untouched."""

    def __init__(self, app: ASGIApp, public_paths: Iterable[str] = (), **kwargs: Any) -> None:
        super().__init__(app, **kwargs)
        self.public_paths = frozenset(public_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"] in self.public_paths:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
