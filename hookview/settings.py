"""Process settings for the API server, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from hookview.core.utils.config import ConfigurationError
from hookview.core.utils.env import load_env_file_if_present


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'")


def _list_env(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class AppSettings:
    backend_name: str = "webhooks"
    host: str = "0.0.0.0"
    port: int = 8080
    max_workers: int = 8
    dashboard_dir: Path | None = None
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> AppSettings:
        """Build settings from ``HOOKVIEW_*`` variables (and ``PORT``).

        Raises ConfigurationError on non-numeric port or worker counts.
        """
        if dotenv:
            load_env_file_if_present()

        dashboard_dir = os.getenv("HOOKVIEW_DASHBOARD_DIR")
        return cls(
            backend_name=os.getenv("HOOKVIEW_BACKEND_NAME", "webhooks"),
            host=os.getenv("HOOKVIEW_HOST", "0.0.0.0"),
            port=_int_env("PORT", 8080),
            max_workers=_int_env("HOOKVIEW_MAX_WORKERS", 8),
            dashboard_dir=Path(dashboard_dir).expanduser() if dashboard_dir else None,
            cors_origins=_list_env("HOOKVIEW_CORS_ORIGINS", ["*"]),
            log_level=os.getenv("HOOKVIEW_LOG_LEVEL", "INFO").upper(),
        )
