"""Error taxonomy for source position resolution.

Every failure surfaces to the HTTP boundary as one discrete outcome.
Nothing here is retried; ``status_for`` only decides how the
transport reports it.
"""

from __future__ import annotations


class SourceTraceError(Exception):
    """Base class for all resolution failures."""

    status_code: int = 500


class BadRequestError(SourceTraceError):
    """Required input missing or non-numeric."""

    status_code = 422


class NotFoundError(SourceTraceError):
    """Artifact reference does not resolve to readable content."""

    status_code = 404

    def __init__(self, reference: str, detail: str = "not found") -> None:
        super().__init__(f"{reference}: {detail}")
        self.reference = reference


class ArtifactIOError(SourceTraceError):
    """Read, decode, or transport failure distinct from not-found."""

    def __init__(self, reference: str, detail: str) -> None:
        super().__init__(f"{reference}: {detail}")
        self.reference = reference


class MalformedMapError(SourceTraceError):
    """A map directive was found but its payload is not a valid map."""


class UnmappablePositionError(SourceTraceError):
    """The map has no entry for the requested generated position."""

    def __init__(self, line: int, column: int) -> None:
        super().__init__(
            f"no source mapping for generated position {line}:{column}"
        )
        self.line = line
        self.column = column


def status_for(error: Exception) -> int:
    """Return the HTTP status the transport should report for *error*."""
    if isinstance(error, SourceTraceError):
        return error.status_code
    return 500
