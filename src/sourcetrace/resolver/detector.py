"""Map-directive detection.

Two directive forms are recognised, checked in order:

1. ``//# sourceMappingURL=data:application/json;base64,<payload>``
   on its own line — decoded in place.
2. ``//# sourceMappingURL=/<path>.map`` — an absolute path resolved
   against the artifact's network origin (scheme + host), never
   against the artifact's own directory.

Relative map references are deliberately not followed; such
artifacts are served as their own source.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from urllib.parse import urlsplit

import httpx

from sourcetrace.constants import (
    ERROR_TRUNCATION_CHARS,
    EXTERNAL_MAP_PATTERN,
    INLINE_MAP_PATTERN,
)
from sourcetrace.errors import MalformedMapError
from sourcetrace.resolver.loader import fetch_json, is_remote
from sourcetrace.resolver.schemas import RawSourceMap

logger = logging.getLogger(__name__)


async def detect(
    content: str, reference: str, *, client: httpx.AsyncClient
) -> RawSourceMap | None:
    """Return the source map attached to *content*, or None."""
    inline = INLINE_MAP_PATTERN.search(content)
    if inline:
        return decode_inline_map(inline.group(1))

    external = EXTERNAL_MAP_PATTERN.search(content)
    if external:
        map_path = external.group(1)
        origin = origin_of(reference)
        if origin is None:
            logger.warning(
                "event=map_unanchored reference=%s map=%s",
                reference,
                map_path,
            )
            return None
        # "//other.host/x.map" still lands on the artifact origin
        map_url = f"{origin}/{map_path.lstrip('/')}"
        logger.debug("event=map_fetch url=%s", map_url)
        return await fetch_json(map_url, client=client)

    return None


def decode_inline_map(payload: str) -> RawSourceMap:
    """Decode a base64 ``data:`` URL payload into a source map."""
    payload = payload.strip()
    # Accept URL-safe alphabet and missing padding, as Node does
    normalized = payload.rstrip("=").replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        raw = base64.b64decode(normalized, validate=True)
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise MalformedMapError(
            "inline source map could not be decoded: "
            f"{payload[:ERROR_TRUNCATION_CHARS]!r} ({exc})"
        ) from exc
    if not isinstance(data, dict):
        raise MalformedMapError("inline source map must be a JSON object")
    return data


def origin_of(reference: str) -> str | None:
    """Return ``scheme://host[:port]`` for a URL reference, else None."""
    if not is_remote(reference):
        return None
    parts = urlsplit(reference)
    return f"{parts.scheme}://{parts.netloc}"
