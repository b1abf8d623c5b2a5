"""Artifact loading, map detection, and position resolution."""

from sourcetrace.resolver.consumer import (
    MappingConsumer,
    initialize_consumer,
    open_consumer,
)
from sourcetrace.resolver.detector import detect
from sourcetrace.resolver.loader import load
from sourcetrace.resolver.position import (
    resolve,
    resolve_artifact,
    strip_root,
)
from sourcetrace.resolver.schemas import (
    GeneratedPosition,
    MappedPosition,
    NoMapping,
    ResolutionResult,
)

__all__ = [
    "GeneratedPosition",
    "MappedPosition",
    "MappingConsumer",
    "NoMapping",
    "ResolutionResult",
    "detect",
    "initialize_consumer",
    "load",
    "open_consumer",
    "resolve",
    "resolve_artifact",
    "strip_root",
]
