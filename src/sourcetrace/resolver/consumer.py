"""Request-scoped mapping consumer over the ``sourcemap`` library.

``open_consumer`` decodes a raw map and yields a ``MappingConsumer``
that is released on every exit path. Positions use 1-based lines and
0-based columns; the library's 0-based lines are converted here and
nowhere else.

Indexed maps (``sections``) are decoded section by section; a query
goes to the last section whose offset is at or before the position.

``initialize_consumer`` is the one-time process setup. Idempotent
(guarded by a module-level flag).
"""

from __future__ import annotations

import json
import logging
import posixpath
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
from typing import Any

import sourcemap

from sourcetrace.errors import MalformedMapError
from sourcetrace.resolver.schemas import (
    MappedPosition,
    NoMapping,
    RawSourceMap,
    ResolvedPosition,
)

logger = logging.getLogger(__name__)

_initialized = False


def initialize_consumer() -> None:
    """Check the mapping backend once per process and log it.

    Second call is a no-op, so the app lifespan and the CLI can both
    call it safely.
    """
    global _initialized  # noqa: PLW0603
    if _initialized:
        return
    _initialized = True

    try:
        backend_version = version("sourcemap")
    except PackageNotFoundError:
        backend_version = "unknown"
    logger.info(
        "event=consumer_initialized backend=sourcemap version=%s",
        backend_version,
    )


@dataclass
class _Section:
    """One decoded map placed at a generated (0-based) offset."""

    line: int
    column: int
    raw: RawSourceMap
    index: Any


class MappingConsumer:
    """Decoded source map answering position and content queries."""

    def __init__(self, raw_map: RawSourceMap) -> None:
        self._sections: list[_Section] | None = _decode_sections(raw_map)

    @property
    def closed(self) -> bool:
        return self._sections is None

    def original_position_for(
        self, line: int, column: int
    ) -> ResolvedPosition:
        """Map a generated (1-based line, 0-based column) position."""
        sections = self._require_open()
        if line < 1 or column < 0:
            return NoMapping(line=line, column=column)

        gen_line = line - 1
        section = None
        for candidate in sections:
            if (candidate.line, candidate.column) <= (gen_line, column):
                section = candidate
        if section is None:
            return NoMapping(line=line, column=column)

        local_line = gen_line - section.line
        local_column = (
            column - section.column if local_line == 0 else column
        )
        try:
            token = section.index.lookup(local_line, local_column)
        except (IndexError, KeyError):
            return NoMapping(line=line, column=column)

        if token is None or not token.src:
            return NoMapping(line=line, column=column)

        return MappedPosition(
            source=token.src,
            line=token.src_line + 1,
            column=token.src_col,
        )

    def source_content_for(self, source: str) -> str | None:
        """Embedded original text for *source*, or None when absent."""
        for section in self._require_open():
            content = _content_in(section.raw, source)
            if content is not None:
                return content
        return None

    def close(self) -> None:
        self._sections = None

    def _require_open(self) -> list[_Section]:
        if self._sections is None:
            raise RuntimeError("mapping consumer is closed")
        return self._sections


@contextmanager
def open_consumer(raw_map: RawSourceMap) -> Iterator[MappingConsumer]:
    """Yield a consumer for *raw_map*, releasing it on every exit path."""
    consumer = MappingConsumer(raw_map)
    try:
        yield consumer
    finally:
        consumer.close()


def _decode_sections(raw_map: RawSourceMap) -> list[_Section]:
    if "sections" not in raw_map:
        return [_Section(0, 0, raw_map, _decode(raw_map))]

    sections: list[_Section] = []
    try:
        for entry in raw_map["sections"]:
            if "map" not in entry:
                raise MalformedMapError(
                    "indexed map sections must embed their map"
                    " (url sections are not followed)"
                )
            offset = entry["offset"]
            sub_map = entry["map"]
            if not isinstance(sub_map, dict):
                raise MalformedMapError(
                    "indexed map section must be a JSON object"
                )
            sections.append(
                _Section(
                    int(offset["line"]),
                    int(offset["column"]),
                    sub_map,
                    _decode(sub_map),
                )
            )
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedMapError(
            f"indexed source map could not be decoded: {exc}"
        ) from exc
    sections.sort(key=lambda s: (s.line, s.column))
    return sections


def _decode(raw_map: RawSourceMap) -> Any:
    # Decoder requires "names"; bundlers omit it when empty
    decodable = {"names": [], **raw_map}
    try:
        return sourcemap.loads(json.dumps(decodable))
    except (ValueError, KeyError, TypeError, IndexError) as exc:
        raise MalformedMapError(
            f"source map could not be decoded: {exc}"
        ) from exc


def _content_in(raw_map: RawSourceMap, source: str) -> str | None:
    sources = raw_map.get("sources") or []
    contents = raw_map.get("sourcesContent") or []
    source_root = raw_map.get("sourceRoot") or ""

    for i, name in enumerate(sources):
        if name is None or i >= len(contents):
            continue
        if _same_source(source, name, source_root):
            content = contents[i]
            return content if isinstance(content, str) else None
    return None


def _same_source(source: str, name: str, source_root: str) -> bool:
    if source == name:
        return True
    if source_root:
        if source == source_root + name:
            return True
        if source == posixpath.join(source_root, name):
            return True
    return False
