"""Pydantic models for the resolution data flow."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Parsed JSON object conforming to the source map v3 schema
RawSourceMap = dict[str, Any]


class GeneratedPosition(BaseModel):
    """Position inside a built artifact (1-based line, 0-based column)."""

    line: int = Field(ge=1)
    column: int = Field(ge=0)


class MappedPosition(BaseModel):
    """Consumer found an original position for the query."""

    kind: Literal["mapped"] = "mapped"
    source: str
    line: int
    column: int


class NoMapping(BaseModel):
    """Consumer has no entry for the queried generated position."""

    kind: Literal["unmapped"] = "unmapped"
    line: int
    column: int


ResolvedPosition = MappedPosition | NoMapping


class ResolutionResult(BaseModel):
    """Externally visible outcome of one resolution request."""

    model_config = ConfigDict(populate_by_name=True)

    root: str
    file: str
    source_content: str | None = Field(
        default=None, alias="sourceContent"
    )
    line: int | None = None
    column: int | None = None
