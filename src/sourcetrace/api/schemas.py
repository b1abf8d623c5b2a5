"""Request/response schemas for the HTTP API."""

from typing import Any

from pydantic import BaseModel, Field


class APIResponse(BaseModel):
    """Standard response envelope for error payloads and probes."""

    success: bool
    data: Any | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
