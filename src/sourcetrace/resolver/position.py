"""Position resolution — generated artifact position to original source.

Per request: load → detect → (pass-through | mapped). The mapped path
holds a consumer session that is closed even when the query fails.
"""

from __future__ import annotations

import logging

import httpx

from sourcetrace.constants import DEFAULT_MODULE_PREFIX
from sourcetrace.errors import UnmappablePositionError
from sourcetrace.resolver.consumer import open_consumer
from sourcetrace.resolver.detector import detect
from sourcetrace.resolver.loader import load
from sourcetrace.resolver.schemas import NoMapping, ResolutionResult

logger = logging.getLogger(__name__)


def strip_root(path: str, root: str) -> str:
    """Remove *root* from the front of *path* at a path boundary.

    A path that does not start with *root* is returned unchanged, so
    stripping an already-stripped value is a no-op.
    """
    root = root.rstrip("/")
    if not root:
        return path
    if path == root:
        return ""
    if path.startswith(root + "/"):
        return path[len(root):]
    return path


def strip_module_prefix(source: str, prefix: str) -> str:
    """Drop the bundler's virtual module scheme from a source name."""
    if prefix and source.startswith(prefix):
        return source[len(prefix):]
    return source


async def resolve(
    reference: str,
    content: str,
    line: int,
    column: int,
    root: str,
    *,
    client: httpx.AsyncClient,
    module_prefix: str = DEFAULT_MODULE_PREFIX,
) -> ResolutionResult:
    """Resolve (*line*, *column*) in the artifact at *reference*."""
    raw_map = await detect(content, reference, client=client)

    if raw_map is None:
        logger.debug("event=pass_through reference=%s", reference)
        return ResolutionResult(
            root=root,
            file=strip_root(reference, root),
            source_content=content,
            line=line,
            column=column,
        )

    with open_consumer(raw_map) as consumer:
        position = consumer.original_position_for(line, column)
        if isinstance(position, NoMapping):
            logger.warning(
                "event=unmappable reference=%s line=%d column=%d",
                reference,
                line,
                column,
            )
            raise UnmappablePositionError(line, column)

        source_content = consumer.source_content_for(position.source)

    file = strip_module_prefix(position.source, module_prefix)
    return ResolutionResult(
        root=root,
        file=strip_root(file, root),
        source_content=source_content,
        line=position.line,
        column=position.column,
    )


async def resolve_artifact(
    reference: str,
    line: int,
    column: int,
    root: str,
    *,
    client: httpx.AsyncClient,
    module_prefix: str = DEFAULT_MODULE_PREFIX,
) -> ResolutionResult:
    """Load the artifact at *reference*, then resolve the position."""
    content = await load(reference, client=client)
    return await resolve(
        reference,
        content,
        line,
        column,
        root,
        client=client,
        module_prefix=module_prefix,
    )
