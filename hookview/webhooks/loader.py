"""Read webhook record blobs and normalize them into WebhookRecord.

Writers have historically used two field naming conventions: canonical
lower camel case (``receivedAt``) and capitalized (``ReceivedAt``). Both are
accepted, per field, with the canonical name taking precedence.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from hookview.core.storage.blob import BlobStorage
from hookview.webhooks.models import WebhookRecord

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"

# attribute -> (canonical name, alternate name)
FIELD_NAMES: dict[str, tuple[str, str]] = {
    "id": ("id", "Id"),
    "received_at": ("receivedAt", "ReceivedAt"),
    "method": ("method", "Method"),
    "path": ("path", "Path"),
    "headers": ("headers", "Headers"),
    "query_parameters": ("queryParameters", "QueryParameters"),
    "raw_body": ("rawBody", "RawBody"),
    "content_type": ("contentType", "ContentType"),
    "source_ip": ("sourceIp", "SourceIp"),
}

REQUIRED_FIELDS = ("id", "received_at", "method", "path")
MAPPING_FIELDS = ("headers", "query_parameters")


class RecordParseError(Exception):
    """Raised when a blob does not hold a usable webhook record."""

    pass


def is_record_key(key: str) -> bool:
    """Return True for keys that are candidate record blobs."""
    return key.endswith(RECORD_SUFFIX)


def _lookup(raw: dict[str, Any], attribute: str) -> Any:
    canonical, alternate = FIELD_NAMES[attribute]
    if raw.get(canonical) is not None:
        return raw[canonical]
    return raw.get(alternate)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, bool)):
        return json.dumps(value)
    return str(value)


def _as_mapping(attribute: str, value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning(
            f"Ignoring '{FIELD_NAMES[attribute][0]}' of type {type(value).__name__}, expected an object"
        )
        return {}
    return {str(key): _as_text(item) for key, item in value.items()}


def normalize_record(raw: Any) -> WebhookRecord:
    """Map a decoded blob document onto a WebhookRecord.

    Optional maps default to empty dicts (also when the stored value is not an
    object) and optional strings to "". Scalar values of other types are
    coerced to strings.

    Raises:
        RecordParseError: If the document is not an object or lacks a required field
    """
    if not isinstance(raw, dict):
        raise RecordParseError(f"Expected a JSON object, got {type(raw).__name__}")

    values: dict[str, Any] = {}
    for attribute in FIELD_NAMES:
        value = _lookup(raw, attribute)
        if attribute in REQUIRED_FIELDS and value is None:
            raise RecordParseError(f"Missing required field '{FIELD_NAMES[attribute][0]}'")

        if attribute in MAPPING_FIELDS:
            values[attribute] = _as_mapping(attribute, value)
        else:
            values[attribute] = _as_text(value)

    return WebhookRecord(**values)


def parse_record(content: bytes) -> WebhookRecord:
    """Decode blob bytes (UTF-8, optional BOM) and normalize them.

    Raises:
        RecordParseError: If the content is not valid JSON or not a record
    """
    try:
        raw = json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RecordParseError(f"Invalid JSON: {e}")
    return normalize_record(raw)


class RecordLoader:
    """Loads WebhookRecords from blob keys."""

    def __init__(self, storage: BlobStorage):
        self._storage = storage

    def load(self, key: str) -> WebhookRecord:
        """Read and parse the record stored at ``key``.

        Raises:
            BlobNotFoundError: If the key disappeared since it was listed
            BlobStorageError: If the read fails
            RecordParseError: If the content is not a valid record
        """
        try:
            return parse_record(self._storage.get(key))
        except RecordParseError as e:
            raise RecordParseError(f"{key}: {e}")
