"""Artifact loader — raw text from a local path or a remote URL.

Each call performs exactly one read or fetch. No retries, no caching.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import httpx

from sourcetrace.constants import (
    ERROR_TRUNCATION_CHARS,
    REMOTE_REFERENCE_PATTERN,
)
from sourcetrace.errors import (
    ArtifactIOError,
    MalformedMapError,
    NotFoundError,
)
from sourcetrace.resolver.schemas import RawSourceMap

logger = logging.getLogger(__name__)


def is_remote(reference: str) -> bool:
    """True if *reference* is an absolute http(s) URL."""
    return REMOTE_REFERENCE_PATTERN.match(reference) is not None


async def load(reference: str, *, client: httpx.AsyncClient) -> str:
    """Return the text content of the artifact at *reference*."""
    if is_remote(reference):
        response = await _get(reference, client=client)
        return response.text
    return await asyncio.to_thread(_read_local, Path(reference))


async def fetch_json(
    url: str, *, client: httpx.AsyncClient
) -> RawSourceMap:
    """Fetch *url* and parse the body as a JSON object."""
    response = await _get(url, client=client)
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedMapError(
            f"{url}: map is not valid JSON ({exc})"
        ) from exc
    if not isinstance(data, dict):
        raise MalformedMapError(
            f"{url}: map must be a JSON object, got "
            f"{str(data)[:ERROR_TRUNCATION_CHARS]!r}"
        )
    return data


async def _get(url: str, *, client: httpx.AsyncClient) -> httpx.Response:
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        logger.warning("event=fetch_failed url=%s error=%s", url, exc)
        raise ArtifactIOError(url, f"fetch failed: {exc}") from exc

    if not response.is_success:
        logger.info(
            "event=fetch_not_found url=%s status=%d",
            url,
            response.status_code,
        )
        raise NotFoundError(url, f"HTTP {response.status_code}")
    return response


def _read_local(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise NotFoundError(str(path)) from exc
    except UnicodeDecodeError as exc:
        raise ArtifactIOError(str(path), f"not UTF-8 ({exc})") from exc
    except OSError as exc:
        raise ArtifactIOError(str(path), exc.strerror or str(exc)) from exc
