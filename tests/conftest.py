from __future__ import annotations

import json
import os
from typing import Any

import pytest

from hookview.core.storage.backends import FilesystemBackend
from hookview.webhooks.service import WebhookService

HOOKVIEW_ENV_KEYS = [
    "HOOKVIEW_STORAGE_CONNECTION_STRING",
    "HOOKVIEW_STORAGE_BACKEND",
    "HOOKVIEW_STORAGE_PATH",
    "HOOKVIEW_BACKEND_NAME",
    "HOOKVIEW_HOST",
    "HOOKVIEW_MAX_WORKERS",
    "HOOKVIEW_DASHBOARD_DIR",
    "HOOKVIEW_CORS_ORIGINS",
    "HOOKVIEW_LOG_LEVEL",
    "HOOKVIEW_API_URL",
    "PORT",
]


def make_record(
    record_id: str,
    received_at: str = "2024-05-01T10:00:00Z",
    method: str = "POST",
    path: str = "/api/webhook",
    **extra: Any,
) -> dict[str, Any]:
    """Canonical (camel case) record document."""
    record = {
        "id": record_id,
        "receivedAt": received_at,
        "method": method,
        "path": path,
        "headers": {},
        "queryParameters": {},
        "rawBody": "",
        "contentType": "",
        "sourceIp": "",
    }
    record.update(extra)
    return record


def legacy_casing(record: dict[str, Any]) -> dict[str, Any]:
    """Same document with capitalized field names."""
    return {key[0].upper() + key[1:]: value for key, value in record.items()}


def store_record(backend, key: str, record: dict[str, Any] | bytes) -> None:
    data = record if isinstance(record, bytes) else json.dumps(record).encode("utf-8")
    backend.put(key, data, content_type="application/json")


@pytest.fixture
def clean_env(monkeypatch):
    """Clean environment fixture to isolate tests."""
    for key in HOOKVIEW_ENV_KEYS:
        if key in os.environ:
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def fs_backend(tmp_path):
    """Filesystem backend rooted in a temporary directory."""
    return FilesystemBackend(base_path=tmp_path / "webhook-requests")


@pytest.fixture
def service(fs_backend):
    return WebhookService.from_backend(fs_backend, max_workers=4)


@pytest.fixture
def seeded_backend(fs_backend):
    """Backend holding a small mixed-casing data set over two days.

    Newest first: c (GET, 05-02 09:00), b (POST, 05-01 12:00), a (POST, 05-01 10:00).
    """
    store_record(
        fs_backend,
        "2024-05-01/a.json",
        make_record(
            "a",
            "2024-05-01T10:00:00Z",
            "POST",
            "/api/messages",
            headers={"User-Agent": "Teams"},
            rawBody='{"conversation": {"id": "19:ABC@thread"}, "text": "hello"}',
            contentType="application/json",
            sourceIp="10.0.0.1",
        ),
    )
    store_record(
        fs_backend,
        "2024-05-01/b.json",
        legacy_casing(
            make_record(
                "b",
                "2024-05-01T12:00:00Z",
                "post",
                "/hooks/github",
                queryParameters={"event": "push"},
                rawBody="plain text body",
                sourceIp="10.0.0.2",
            )
        ),
    )
    store_record(
        fs_backend,
        "2024-05-02/c.json",
        make_record("c", "2024-05-02T09:00:00Z", "GET", "/health", sourceIp="10.0.0.1"),
    )
    return fs_backend


@pytest.fixture
def record_factory():
    """``make_record`` helper for building canonical record documents."""
    return make_record


@pytest.fixture
def capitalize_fields():
    """``legacy_casing`` helper for the capitalized naming convention."""
    return legacy_casing


@pytest.fixture
def put_record():
    """``store_record`` helper writing a document (or raw bytes) to a backend."""
    return store_record
