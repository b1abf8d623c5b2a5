"""FastAPI dependency injection for settings, HTTP client, and gating."""

from __future__ import annotations

import logging

import httpx
from fastapi import HTTPException, Request

from sourcetrace.config import Settings

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    """Get Settings threaded through ``create_app``."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Get the lifespan-owned AsyncClient from app.state."""
    return request.app.state.typed.http_client  # type: ignore[no-any-return]


def require_development_mode(request: Request) -> None:
    """Answer 404 unless the app was built for development mode.

    Runs before parameter checks so a non-development deployment
    never reveals that the route exists.
    """
    settings = get_settings(request)
    if not settings.is_development:
        logger.debug(
            "event=gated path=%s mode=%s",
            request.url.path,
            settings.runtime_mode,
        )
        raise HTTPException(status_code=404)
