"""FastAPI application factory with lifespan startup."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sourcetrace import __version__
from sourcetrace.api.app_state import AppState
from sourcetrace.api.routes import health, source_map
from sourcetrace.api.schemas import APIResponse
from sourcetrace.config import Settings
from sourcetrace.errors import SourceTraceError, status_for
from sourcetrace.logging_config import setup_logging
from sourcetrace.resolver import initialize_consumer

_logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings

    # 1. One-time mapping consumer setup
    initialize_consumer()

    # 2. Shared HTTP client for remote artifacts and maps
    http_client = httpx.AsyncClient(
        timeout=settings.fetch_timeout_seconds,
        follow_redirects=True,
    )
    app.state.typed = AppState(settings=settings, http_client=http_client)

    if not settings.is_development:
        _logger.warning(
            "event=resolution_disabled mode=%s", settings.runtime_mode
        )

    yield

    # Cleanup
    await http_client.aclose()


async def _handle_resolution_error(
    request: Request, exc: Exception
) -> JSONResponse:
    status = status_for(exc)
    log = _logger.warning if status < 500 else _logger.error
    log(
        "event=resolution_failed path=%s status=%d error_type=%s error=%s",
        request.url.path,
        status,
        type(exc).__name__,
        exc,
    )
    return JSONResponse(
        status_code=status,
        content=APIResponse(success=False, error=str(exc)).model_dump(),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app; *settings* decide gating, CORS, and paths."""
    settings = settings or Settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="sourcetrace",
        description=(
            "Development error overlay backend --"
            " maps built artifact positions to original source"
        ),
        version=__version__,
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Overlay runs in the app's browser origin, not ours
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        allow_credentials=False,
    )

    app.add_exception_handler(SourceTraceError, _handle_resolution_error)

    app.include_router(health.router)
    app.include_router(source_map.router)

    return app


app = create_app()
