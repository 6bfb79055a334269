"""Display helpers for webhook records in terminal output."""

from __future__ import annotations

import json
import math
from typing import Any

from hookview.webhooks.filters import parse_timestamp

BYTE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_timestamp(value: str | None) -> str:
    """Render an ISO timestamp as ``Mon D, YYYY HH:MM:SS``.

    Empty values render as ``-``; unparseable ones are returned unchanged.
    """
    if not value:
        return "-"
    parsed = parse_timestamp(value)
    if parsed is None:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed:%Y %H:%M:%S}"


def truncate_id(value: str | None, length: int = 8) -> str:
    if not value:
        return "-"
    if len(value) <= length:
        return value
    return f"{value[:length]}..."


def format_bytes(size: int) -> str:
    """Human readable size with 1024-based units, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 Bytes"
    exponent = min(int(math.log(size, 1024)), len(BYTE_UNITS) - 1)
    scaled = round(size / 1024**exponent, 2)
    return f"{scaled:g} {BYTE_UNITS[exponent]}"


def try_parse_json(text: str | None) -> Any | None:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def pretty_body(raw_body: str | None) -> str:
    """Indent JSON bodies; anything else is shown as is."""
    parsed = try_parse_json(raw_body)
    if parsed is None:
        return raw_body or ""
    return json.dumps(parsed, indent=2, ensure_ascii=False)
