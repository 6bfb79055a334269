"""Data types for webhook request records and queries over them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class WebhookRecord:
    """A captured webhook request, as read from its blob.

    ``id`` comes from the blob content and need not match the storage key.
    """

    id: str
    received_at: str
    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    query_parameters: dict[str, str] = field(default_factory=dict)
    raw_body: str = ""
    content_type: str = ""
    source_ip: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the canonical lower-camel-case representation."""
        return {
            "id": self.id,
            "receivedAt": self.received_at,
            "method": self.method,
            "path": self.path,
            "headers": dict(self.headers),
            "queryParameters": dict(self.query_parameters),
            "rawBody": self.raw_body,
            "contentType": self.content_type,
            "sourceIp": self.source_ip,
        }


@dataclass(frozen=True)
class WebhookQuery:
    """Filter, scope and page selection for a listing.

    Every filter left as None is not applied. ``date`` scopes the listing to
    keys below ``{date}/``.
    """

    date: str | None = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    method: str | None = None
    source_ip: str | None = None
    search: str | None = None
    conversation_id: str | None = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")

    @property
    def key_prefix(self) -> str | None:
        return f"{self.date}/" if self.date else None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class WebhookPage:
    """One page of a filtered listing; ``total`` counts the whole filtered set."""

    records: list[WebhookRecord]
    total: int
    page: int
    limit: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [record.to_dict() for record in self.records],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
        }


@dataclass
class WebhookStats:
    """Counts over every readable record in the namespace."""

    total: int
    by_method: dict[str, int]
    by_date: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "byMethod": dict(self.by_method),
            "byDate": dict(self.by_date),
        }
