"""Shared test fixtures — source map builders and mocked HTTP."""

import base64
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from sourcetrace.config import Settings
from sourcetrace.constants import RuntimeMode

ROOT = "/srv/app"

# Two generated positions on line 1:
#   1:0 -> original 3:2   ("AAEE")
#   1:4 -> original 3:6   ("IAAI", relative to the previous segment)
SIMPLE_MAPPINGS = "AAEE,IAAI"


def make_map(
    *,
    sources: list[str] | None = None,
    sources_content: list[str | None] | None = None,
    mappings: str = SIMPLE_MAPPINGS,
    **extra: Any,
) -> dict[str, Any]:
    """Build a minimal v3 source map."""
    raw: dict[str, Any] = {
        "version": 3,
        "sources": sources or [f"route-module:{ROOT}/app/routes/a.ts"],
        "names": [],
        "mappings": mappings,
    }
    if sources_content is not None:
        raw["sourcesContent"] = sources_content
    raw.update(extra)
    return raw


def inline_directive(raw_map: dict[str, Any]) -> str:
    payload = base64.b64encode(json.dumps(raw_map).encode()).decode()
    return f"//# sourceMappingURL=data:application/json;base64,{payload}"


def inline_artifact(raw_map: dict[str, Any], body: str = "f(1);g(2);") -> str:
    """Artifact text ending with an inline map directive."""
    return f"{body}\n{inline_directive(raw_map)}\n"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every requested URL."""

    def __init__(
        self, handler: Callable[[httpx.Request], httpx.Response]
    ) -> None:
        self.requested: list[str] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requested.append(str(request.url))
            return handler(request)

        super().__init__(_record)


def routes_handler(
    routes: dict[str, httpx.Response],
) -> Callable[[httpx.Request], httpx.Response]:
    """Serve fixed responses by URL; everything else is a 404."""

    def _handle(request: httpx.Request) -> httpx.Response:
        return routes.get(str(request.url), httpx.Response(404))

    return _handle


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport(routes_handler({}))


@pytest.fixture
async def http_client(transport: RecordingTransport):
    async with httpx.AsyncClient(transport=transport) as client:
        yield client


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        runtime_mode=RuntimeMode.DEVELOPMENT,
        root_path=ROOT,
    )
