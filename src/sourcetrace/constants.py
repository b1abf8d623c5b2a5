"""Shared constants — single source of truth for cross-module values.

StrEnum members are str-compatible, so settings and JSON payloads
work unchanged.
"""

from __future__ import annotations

import re
from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class RuntimeMode(StrEnum):
    """Process runtime mode. Resolution is only served in DEVELOPMENT."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


# ── Map directives ───────────────────────────────────────

# Inline map: the directive must start its own line and the
# base64 payload runs to end of line.
INLINE_MAP_PATTERN = re.compile(
    r"\n//# sourceMappingURL=data:application/json;base64,(.*)"
)

# External map: absolute path only, anchored later at the
# artifact's network origin.
EXTERNAL_MAP_PATTERN = re.compile(r"//# sourceMappingURL=(/(.*)\.map)")

REMOTE_REFERENCE_PATTERN = re.compile(r"^https?://")

# ── Defaults ─────────────────────────────────────────────

DEFAULT_MODULE_PREFIX = "route-module:"
DEFAULT_BUILD_OUTPUT_DIR = "build/route"

# Truncate map payloads echoed into error messages / logs
ERROR_TRUNCATION_CHARS = 200
