"""Webhook request viewer over JSON records in blob storage.

This package provides:
- Blob storage backends (MinIO, local filesystem) behind a named registry
- Listing, filtering, pagination and statistics over stored webhook requests
- A FastAPI service exposing them, plus an HTTP client and terminal front end
"""

__all__ = ["api", "cli", "client", "core", "formatting", "settings", "webhooks"]
