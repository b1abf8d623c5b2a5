"""Environment-based configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings

from sourcetrace.constants import (
    DEFAULT_BUILD_OUTPUT_DIR,
    DEFAULT_MODULE_PREFIX,
    RuntimeMode,
)


class Settings(BaseSettings):
    """Reads from .env file and SOURCETRACE_* environment variables."""

    # Resolution routes answer 404 outside development
    runtime_mode: RuntimeMode = RuntimeMode.DEVELOPMENT

    # Paths
    root_path: str = ""  # empty = process cwd
    build_output_dir: str = DEFAULT_BUILD_OUTPUT_DIR

    # Mapping consumer
    module_prefix: str = DEFAULT_MODULE_PREFIX

    # HTTP
    cors_origins: str = "*"
    fetch_timeout_seconds: float = 10.0
    host: str = "127.0.0.1"
    port: int = 8002

    # Logging
    log_level: str = "INFO"

    @field_validator("runtime_mode", mode="before")
    @classmethod
    def _normalize_mode(cls, v: Any) -> Any:
        """Accept any casing, e.g. NODE_ENV-style ``Development``."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("fetch_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("fetch_timeout_seconds must be positive")
        return v

    @property
    def is_development(self) -> bool:
        return self.runtime_mode == RuntimeMode.DEVELOPMENT

    @property
    def root(self) -> str:
        """Absolute project root reported in every resolution result."""
        if self.root_path:
            return str(Path(self.root_path).resolve())
        return str(Path.cwd())

    @property
    def build_output_prefix(self) -> str:
        """Absolute build-output directory stripped from incoming files."""
        return str(Path(self.root) / self.build_output_dir)

    @property
    def cors_origin_list(self) -> list[str]:
        return [
            o.strip() for o in self.cors_origins.split(",") if o.strip()
        ]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "SOURCETRACE_",
        "extra": "ignore",
    }
