"""Blob storage backend configuration.

This module defines the CONFIGURATION dict which maps backend names to their
connection parameters. The API server reads webhook records from the backend
named by ``HOOKVIEW_BACKEND_NAME`` (``webhooks`` by default).

Configuration location: configs/blob_backends.py

Environment overrides:
    # Credential for the object store holding the webhook-requests bucket
    export HOOKVIEW_STORAGE_CONNECTION_STRING=\
        "Endpoint=localhost:9000;AccessKey=...;SecretKey=...;Secure=false"

    # Switch the webhooks namespace between MinIO and the local filesystem
    export HOOKVIEW_STORAGE_BACKEND=filesystem

Configuration inheritance:
    # Use the "__inherits__" key to reuse another entry's settings

    "archive": {
        "__inherits__": "webhooks",
        "bucket": "webhook-requests-archive",
    }
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from hookview.core.utils.env import load_env_file_if_present

load_env_file_if_present()  # Load .env file if present
PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Container the ingesting side writes webhook requests into
WEBHOOK_BUCKET = "webhook-requests"
CONNECTION_STRING_ENV = "HOOKVIEW_STORAGE_CONNECTION_STRING"


def _resolve_default_base_path() -> Path:
    """Return the default filesystem storage root."""
    configured_path = os.environ.get("HOOKVIEW_STORAGE_PATH")
    if configured_path:
        return Path(configured_path).expanduser()

    return PROJECT_ROOT / "var" / "blob_storage"


DEFAULT_BASE_PATH = _resolve_default_base_path()


def _build_minio_config() -> dict[str, Any]:
    """Return a MinIO backend configuration for the webhook bucket."""
    return {
        "type": "minio",
        "connection_string": os.getenv(CONNECTION_STRING_ENV, ""),
        "bucket": WEBHOOK_BUCKET,
    }


def _build_webhooks_config() -> dict[str, Any]:
    """Determine the configuration for the webhooks namespace."""
    backend_type = os.getenv("HOOKVIEW_STORAGE_BACKEND", "minio").strip().lower()
    if backend_type == "filesystem":
        return {
            "type": "filesystem",
            "base_path": str(DEFAULT_BASE_PATH / WEBHOOK_BUCKET),
        }

    return _build_minio_config()


CONFIGURATION = {
    # Namespace served by the API
    "webhooks": _build_webhooks_config(),
    # Standalone MinIO backend (handy for scripts)
    "minio": _build_minio_config(),
    # Local filesystem copy of the bucket for development and seeding
    "local": {
        "type": "filesystem",
        "base_path": str(DEFAULT_BASE_PATH / WEBHOOK_BUCKET),
    },
    # Temporary storage backend
    "tmp": {
        "type": "filesystem",
        "base_path": "/tmp/hookview",
    },
}
