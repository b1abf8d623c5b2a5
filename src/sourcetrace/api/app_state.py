"""Typed application state — replaces untyped getattr() access."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from sourcetrace.config import Settings


@dataclass
class AppState:
    """Typed container for app.state attributes.

    ``http_client`` is the only object shared across requests; it is
    opened and closed by the app lifespan.
    """

    settings: Settings
    http_client: httpx.AsyncClient
