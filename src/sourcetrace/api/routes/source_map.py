"""Source-map resolution endpoints for the development error overlay."""

from __future__ import annotations

import logging
import time

import httpx
from fastapi import APIRouter, Depends

from sourcetrace.api.dependencies import (
    get_http_client,
    get_settings,
    require_development_mode,
)
from sourcetrace.config import Settings
from sourcetrace.errors import BadRequestError
from sourcetrace.resolver import (
    GeneratedPosition,
    ResolutionResult,
    resolve_artifact,
)
from sourcetrace.resolver.position import strip_root

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/source-map",
    tags=["source-map"],
    dependencies=[Depends(require_development_mode)],
)


def parse_position(
    line: str | None, column: str | None
) -> GeneratedPosition:
    """Validate the textual line/column query parameters."""
    try:
        return GeneratedPosition(
            line=int(line),  # type: ignore[arg-type]
            column=int(column),  # type: ignore[arg-type]
        )
    except (TypeError, ValueError) as exc:
        raise BadRequestError(
            f"line and column must be integers (line={line!r},"
            f" column={column!r})"
        ) from exc


@router.get("")
async def probe() -> dict[str, str]:
    """Availability probe; the overlay checks this before resolving."""
    return {"status": "ok"}


@router.post("", response_model=ResolutionResult)
async def resolve_position(
    file: str | None = None,
    line: str | None = None,
    column: str | None = None,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> ResolutionResult:
    """Resolve a built-artifact position to its original source."""
    if file:
        file = strip_root(file, settings.build_output_prefix)

    if not file or not line or not column:
        raise BadRequestError("file, line and column are required")

    position = parse_position(line, column)

    start = time.monotonic()
    result = await resolve_artifact(
        file,
        position.line,
        position.column,
        settings.root,
        client=client,
        module_prefix=settings.module_prefix,
    )
    logger.info(
        "event=resolved file=%s line=%d column=%d duration_ms=%.1f",
        result.file,
        position.line,
        position.column,
        (time.monotonic() - start) * 1000,
    )
    return result
