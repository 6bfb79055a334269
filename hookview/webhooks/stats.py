"""Aggregate counts over webhook records."""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl

from hookview.webhooks.filters import received_date
from hookview.webhooks.models import WebhookRecord, WebhookStats


def records_frame(records: Sequence[WebhookRecord]) -> pl.DataFrame:
    """Project records onto the columns the aggregations group by."""
    return pl.DataFrame(
        {
            "method": [record.method.upper() for record in records],
            "date": [received_date(record) for record in records],
        },
        schema={"method": pl.Utf8, "date": pl.Utf8},
    )


def _count_by(frame: pl.DataFrame, column: str) -> dict[str, int]:
    counts = frame.group_by(column).agg(pl.len().alias("count")).sort(column)
    return dict(zip(counts[column].to_list(), counts["count"].to_list(), strict=True))


def aggregate_stats(records: Sequence[WebhookRecord]) -> WebhookStats:
    """Count records overall, per upper-cased method and per received date.

    Examples:
        >>> aggregate_stats(records).to_dict()
        {'total': 3, 'byMethod': {'GET': 2, 'POST': 1}, 'byDate': {'2026-01-15': 3}}
    """
    frame = records_frame(records)
    return WebhookStats(
        total=frame.height,
        by_method=_count_by(frame, "method"),
        by_date=_count_by(frame, "date"),
    )
