from __future__ import annotations

from fastapi import Request

from hookview.webhooks.service import WebhookService


def get_service(request: Request) -> WebhookService:
    """The process-wide WebhookService built by create_app."""
    return request.app.state.webhook_service
