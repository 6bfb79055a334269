"""FastAPI application factory for the webhook viewer API.

Run with ``uvicorn --factory hookview.api.app:create_app`` or ``hookview serve``.
"""
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from hookview.api import routes_health, routes_webhooks
from hookview.core.storage.blob import BlobStorageError
from hookview.core.storage.registry import get_default_registry
from hookview.core.utils.config import ConfigurationError
from hookview.settings import AppSettings
from hookview.webhooks.service import WebhookNotFoundError, WebhookService

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def build_service(settings: AppSettings) -> WebhookService:
    """Service reading from the configured registry backend, built on first use."""
    return WebhookService(
        lambda: get_default_registry().get_backend(settings.backend_name),
        max_workers=settings.max_workers,
    )


def _format_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "query")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WebhookNotFoundError)
    async def webhook_not_found(request: Request, exc: WebhookNotFoundError):
        return JSONResponse(status_code=404, content={"error": "Webhook not found"})

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError):
        logger.error(f"Configuration error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(BlobStorageError)
    async def storage_error(request: Request, exc: BlobStorageError):
        logger.error(f"Blob storage error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Blob storage request failed"})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _format_validation_error(exc)})


def mount_dashboard(app: FastAPI, dashboard_dir: Path) -> None:
    """Serve built dashboard assets, falling back to index.html for client-side routes."""
    root = dashboard_dir.resolve()
    index = root / "index.html"
    if not index.is_file():
        logger.warning(f"Dashboard directory {root} has no index.html; not serving it")
        return

    @app.get("/{full_path:path}", include_in_schema=False)
    def dashboard(full_path: str):
        if full_path == API_PREFIX.strip("/") or full_path.startswith(API_PREFIX.strip("/") + "/"):
            return JSONResponse(status_code=404, content={"error": "Not found"})

        candidate = (root / full_path).resolve()
        if full_path and root in candidate.parents and candidate.is_file():
            return FileResponse(candidate)
        return FileResponse(index)

    logger.info(f"Serving dashboard from {root}")


def create_app(
    settings: AppSettings | None = None,
    service: WebhookService | None = None,
) -> FastAPI:
    settings = settings or AppSettings.from_env()

    app = FastAPI(
        title="Webhook Viewer API",
        version="0.1.0",
        description="List, filter and inspect captured webhook requests stored in blob storage",
    )
    app.state.settings = settings
    app.state.webhook_service = service or build_service(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(routes_health.router, prefix=API_PREFIX)
    app.include_router(routes_webhooks.router, prefix=API_PREFIX)

    if settings.dashboard_dir is not None:
        mount_dashboard(app, settings.dashboard_dir)

    return app
