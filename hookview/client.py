from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from requests.utils import quote
from urllib3.util.retry import Retry

API_URL = "http://localhost:8080/api"


class HookviewAPIError(Exception):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class WebhookNotFoundError(HookviewAPIError):
    """Raised when the API reports an unknown webhook id."""

    pass


def _session_with_retries(total: int = 3, backoff: float = 0.5) -> requests.Session:
    sess = requests.Session()
    retries = Retry(
        total=total,
        read=total,
        connect=total,
        backoff_factor=backoff,
        status_forcelist=(429, 502, 503, 504),
        allowed_methods=("GET", "DELETE"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retries)
    sess.mount("http://", adapter)
    sess.mount("https://", adapter)
    return sess


def _error_message(res: requests.Response) -> str:
    try:
        payload = res.json()
    except ValueError:
        return res.text or res.reason or "Request failed"
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return res.reason or "Request failed"


def _webhook_path(webhook_id: str) -> str:
    return f"/webhooks/{quote(webhook_id, safe='')}"


def _compact_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop unset and empty-string parameters."""
    return {key: value for key, value in params.items() if value is not None and value != ""}


@dataclass
class HookviewClient:
    api_url: str = API_URL
    timeout: float = 30.0

    def __post_init__(self) -> None:
        self.api_url = self.api_url.rstrip("/")
        self.session = _session_with_retries()

    @classmethod
    def from_env(cls) -> HookviewClient:
        return cls(api_url=os.getenv("HOOKVIEW_API_URL", API_URL))

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        single_webhook: bool = False,
    ) -> requests.Response:
        url = f"{self.api_url}{path}"
        res = self.session.request(method, url, params=params or {}, timeout=self.timeout)
        if res.status_code == 404 and single_webhook:
            raise WebhookNotFoundError(404, _error_message(res))
        if res.status_code >= 400:
            raise HookviewAPIError(res.status_code, _error_message(res))
        return res

    def list_webhooks(
        self,
        date: str | None = None,
        page: int = 1,
        limit: int = 10,
        method: str | None = None,
        source_ip: str | None = None,
        search: str | None = None,
        conversation_id: str | None = None,
    ) -> dict[str, Any]:
        """Fetch one page of webhooks: ``{"data", "total", "page", "limit"}``."""
        params = _compact_params(
            {
                "date": date,
                "page": page,
                "limit": limit,
                "method": method,
                "sourceIp": source_ip,
                "search": search,
                "conversationId": conversation_id,
            }
        )
        return self._request("GET", "/webhooks", params=params).json()

    def iter_webhooks(self, limit: int = 100, **filters: Any) -> Iterator[dict[str, Any]]:
        """Yield every matching webhook, following pages until ``total`` is reached."""
        page = 1
        seen = 0
        while True:
            payload = self.list_webhooks(page=page, limit=limit, **filters)
            data = payload.get("data", [])
            yield from data
            seen += len(data)
            if not data or seen >= payload.get("total", 0):
                return
            page += 1

    def get_webhook(self, webhook_id: str) -> dict[str, Any]:
        return self._request("GET", _webhook_path(webhook_id), single_webhook=True).json()

    def delete_webhook(self, webhook_id: str) -> None:
        self._request("DELETE", _webhook_path(webhook_id), single_webhook=True)

    def get_dates(self) -> list[str]:
        return list(self._request("GET", "/webhooks/dates").json().get("dates", []))

    def get_stats(self) -> dict[str, Any]:
        return self._request("GET", "/webhooks/stats").json()

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/health").json()
