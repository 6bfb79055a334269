"""
Webhook record endpoints.

- GET    /api/webhooks        - filtered, paginated listing (newest first)
- GET    /api/webhooks/dates  - date folders present in storage
- GET    /api/webhooks/stats  - counts by method and by date
- GET    /api/webhooks/{id}   - single record
- DELETE /api/webhooks/{id}   - delete a record's blob
"""
import logging

from fastapi import APIRouter, Depends, Query, Response

from hookview.api.deps import get_service
from hookview.webhooks.models import DEFAULT_LIMIT, DEFAULT_PAGE, WebhookQuery
from hookview.webhooks.service import WebhookService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/webhooks", tags=["webhooks"])

DATE_PATTERN = r"^(\d{4}-\d{2}-\d{2})?$"
MAX_LIMIT = 1000


@router.get("")
def list_webhooks(
    date: str | None = Query(default=None, pattern=DATE_PATTERN),
    page: int = Query(default=DEFAULT_PAGE, ge=1),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    method: str | None = Query(default=None),
    source_ip: str | None = Query(default=None, alias="sourceIp"),
    search: str | None = Query(default=None),
    conversation_id: str | None = Query(default=None, alias="conversationId"),
    service: WebhookService = Depends(get_service),
):
    """List webhook requests with pagination and filtering."""
    query = WebhookQuery(
        date=date or None,
        page=page,
        limit=limit,
        method=method or None,
        source_ip=source_ip or None,
        search=search or None,
        conversation_id=conversation_id or None,
    )
    return service.query(query).to_dict()


@router.get("/dates")
def list_dates(service: WebhookService = Depends(get_service)):
    """Date folders (yyyy-MM-dd) present in storage, newest first."""
    return {"dates": service.list_dates()}


@router.get("/stats")
def get_stats(service: WebhookService = Depends(get_service)):
    """Aggregated counts over every stored webhook request."""
    return service.stats().to_dict()


@router.get("/{webhook_id}")
def get_webhook(webhook_id: str, service: WebhookService = Depends(get_service)):
    return service.find_by_id(webhook_id).to_dict()


@router.delete("/{webhook_id}", status_code=204)
def delete_webhook(webhook_id: str, service: WebhookService = Depends(get_service)):
    service.delete_by_id(webhook_id)
    logger.info(f"Webhook {webhook_id} deleted via API")
    return Response(status_code=204)
