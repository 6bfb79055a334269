"""Predicates, ordering and pagination for webhook record listings.

All functions here are pure and operate on already-loaded records, so the
scan-filter-sort pipeline can be composed and tested without a blob store.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar

from hookview.webhooks.models import WebhookQuery, WebhookRecord

Predicate = Callable[[WebhookRecord], bool]
T = TypeVar("T")

# Fractional seconds beyond microseconds (e.g. .NET's 7 digits) are cut to 6
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def method_filter(method: str) -> Predicate:
    expected = method.upper()

    def matches(record: WebhookRecord) -> bool:
        return record.method.upper() == expected

    return matches


def source_ip_filter(source_ip: str) -> Predicate:
    def matches(record: WebhookRecord) -> bool:
        return record.source_ip == source_ip

    return matches


def searchable_values(record: WebhookRecord) -> Iterable[str]:
    """Yield every field free-text search looks at."""
    yield record.id
    yield record.path
    yield record.raw_body
    yield record.content_type
    yield from record.headers.values()
    yield from record.query_parameters.values()


def search_filter(term: str) -> Predicate:
    """Case-insensitive substring match over id, path, body, content type,
    header values and query parameter values."""
    needle = term.lower()

    def matches(record: WebhookRecord) -> bool:
        return any(needle in value.lower() for value in searchable_values(record))

    return matches


def _is_falsy(value: Any) -> bool:
    """JavaScript truthiness: empty arrays and objects count as true."""
    if isinstance(value, (list, dict)):
        return False
    # NaN is the only value unequal to itself
    return not value or value != value


def _script_string(value: Any) -> str:
    """Text form of a decoded JSON value as JavaScript's ``String()`` gives it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join("" if item is None else _script_string(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def extract_conversation_id(raw_body: str) -> str | None:
    """Return ``conversation.id`` from a JSON body, or None when absent.

    Bodies that are not JSON, or whose ``conversation.id`` is falsy (null,
    empty, ``0``, ``false``), yield None. Other ids are stringified with
    JavaScript rules, so ``1.0`` reads as ``"1"`` and ``true`` as ``"true"``.
    """
    if not raw_body:
        return None
    try:
        payload = json.loads(raw_body)
    except ValueError:
        return None

    if not isinstance(payload, dict):
        return None
    conversation = payload.get("conversation")
    if not isinstance(conversation, dict):
        return None

    conversation_id = conversation.get("id")
    if _is_falsy(conversation_id):
        return None
    return _script_string(conversation_id)


def conversation_id_filter(conversation_id: str) -> Predicate:
    needle = conversation_id.lower()

    def matches(record: WebhookRecord) -> bool:
        found = extract_conversation_id(record.raw_body)
        return found is not None and needle in found.lower()

    return matches


def build_predicates(query: WebhookQuery) -> list[Predicate]:
    """Translate the supplied (non-empty) filters of a query into predicates."""
    predicates: list[Predicate] = []
    if query.method:
        predicates.append(method_filter(query.method))
    if query.source_ip:
        predicates.append(source_ip_filter(query.source_ip))
    if query.search:
        predicates.append(search_filter(query.search))
    if query.conversation_id:
        predicates.append(conversation_id_filter(query.conversation_id))
    return predicates


def apply_filters(
    records: Iterable[WebhookRecord], predicates: Sequence[Predicate]
) -> list[WebhookRecord]:
    """Keep the records satisfying every predicate."""
    return [record for record in records if all(check(record) for check in predicates)]


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(_FRACTION_RE.sub(r"\1", value.strip()))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def received_at_sort_key(record: WebhookRecord) -> tuple[int, datetime]:
    """Sort key for newest-first ordering with ``reverse=True``.

    Unparseable timestamps rank below every valid one.
    """
    parsed = parse_timestamp(record.received_at)
    if parsed is None:
        return (0, datetime.min.replace(tzinfo=UTC))
    return (1, parsed)


def sort_newest_first(records: Iterable[WebhookRecord]) -> list[WebhookRecord]:
    return sorted(records, key=received_at_sort_key, reverse=True)


def paginate(items: Sequence[T], page: int, limit: int) -> list[T]:
    """Return the 1-based ``page`` of ``limit`` items; out of range pages are empty."""
    start = (page - 1) * limit
    return list(items[start : start + limit])


def date_prefix_of(key: str) -> str | None:
    """Return the date folder of a storage key, or None for top-level keys."""
    head, separator, _ = key.partition("/")
    if not separator:
        return None
    return head


def received_date(record: WebhookRecord) -> str:
    """Date component of ``receivedAt`` (its first 10 characters)."""
    return record.received_at[:10]
