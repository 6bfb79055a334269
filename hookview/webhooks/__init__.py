"""Webhook record listing, filtering and statistics over blob storage."""

from hookview.webhooks.loader import RecordLoader, RecordParseError, normalize_record
from hookview.webhooks.models import WebhookPage, WebhookQuery, WebhookRecord, WebhookStats
from hookview.webhooks.service import WebhookNotFoundError, WebhookService

__all__ = [
    "WebhookRecord",
    "WebhookQuery",
    "WebhookPage",
    "WebhookStats",
    "RecordLoader",
    "RecordParseError",
    "normalize_record",
    "WebhookService",
    "WebhookNotFoundError",
]
