"""Query, statistics and point operations over the webhook blob namespace.

There is no index: every operation lists the relevant keys, reads the
candidate blobs (in parallel), and works on the materialized batch. A record
that cannot be read or parsed is logged and skipped; only a failure of the
listing call itself fails the operation.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from hookview.core.storage.blob import (
    BlobNotFoundError,
    BlobStorage,
    BlobStorageBackend,
    BlobStorageError,
)
from hookview.webhooks.filters import (
    apply_filters,
    build_predicates,
    date_prefix_of,
    paginate,
    sort_newest_first,
)
from hookview.webhooks.loader import RecordLoader, RecordParseError, is_record_key
from hookview.webhooks.models import WebhookPage, WebhookQuery, WebhookRecord, WebhookStats
from hookview.webhooks.stats import aggregate_stats

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

BackendFactory = Callable[[], BlobStorageBackend]
LoadedRecord = tuple[str, WebhookRecord]


class WebhookNotFoundError(Exception):
    """Raised when no readable record carries the requested id."""

    pass


class WebhookService:
    """Operations over webhook records stored one JSON blob per request.

    The blob backend is built on first use by ``backend_factory`` and reused
    afterwards. A factory failure (e.g. ``ConfigurationError`` for a missing
    credential) surfaces from whichever operation triggered it and is retried
    on the next call.
    """

    def __init__(self, backend_factory: BackendFactory, max_workers: int = DEFAULT_MAX_WORKERS):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._backend_factory = backend_factory
        self._max_workers = max_workers
        self._storage: BlobStorage | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_backend(
        cls, backend: BlobStorageBackend, max_workers: int = DEFAULT_MAX_WORKERS
    ) -> WebhookService:
        return cls(lambda: backend, max_workers=max_workers)

    @property
    def storage(self) -> BlobStorage:
        if self._storage is None:
            with self._lock:
                if self._storage is None:
                    self._storage = BlobStorage(self._backend_factory())
        return self._storage

    def _list_record_keys(self, prefix: str | None = None) -> list[str]:
        keys = [key for key in self.storage.list_keys(prefix) if is_record_key(key)]
        logger.debug(f"Listed {len(keys)} record blobs under '{prefix or ''}'")
        return keys

    def _load_or_skip(self, loader: RecordLoader, key: str) -> LoadedRecord | None:
        try:
            return key, loader.load(key)
        except BlobNotFoundError:
            logger.warning(f"Skipping {key}: blob disappeared after listing")
        except RecordParseError as e:
            logger.warning(f"Skipping unparseable record {e}")
        except BlobStorageError as e:
            logger.warning(f"Skipping {key}: {e}")
        return None

    def _load_many(self, keys: Sequence[str]) -> list[LoadedRecord]:
        """Read keys in parallel; results keep the order of ``keys``."""
        if not keys:
            return []

        loader = RecordLoader(self.storage)
        workers = min(self._max_workers, len(keys))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = executor.map(lambda key: self._load_or_skip(loader, key), keys)
            return [loaded for loaded in results if loaded is not None]

    def _load_records(self, prefix: str | None = None) -> list[WebhookRecord]:
        return [record for _, record in self._load_many(self._list_record_keys(prefix))]

    def query(self, query: WebhookQuery | None = None) -> WebhookPage:
        """Filter, sort (newest first) and paginate the records in scope.

        ``total`` is the size of the filtered set before pagination.
        """
        query = query or WebhookQuery()
        records = self._load_records(query.key_prefix)
        matching = sort_newest_first(apply_filters(records, build_predicates(query)))

        logger.debug(f"Query matched {len(matching)} of {len(records)} records")
        return WebhookPage(
            records=paginate(matching, query.page, query.limit),
            total=len(matching),
            page=query.page,
            limit=query.limit,
        )

    def stats(self) -> WebhookStats:
        """Counts by method and by received date over the whole namespace."""
        return aggregate_stats(self._load_records())

    def _locate(self, webhook_id: str) -> LoadedRecord:
        """Find the first record (in listing order) whose content id matches.

        Keys are read in batches so the scan stops soon after a match.
        """
        keys = self._list_record_keys()
        for start in range(0, len(keys), self._max_workers):
            for key, record in self._load_many(keys[start : start + self._max_workers]):
                if record.id == webhook_id:
                    return key, record

        raise WebhookNotFoundError(f"Webhook not found: {webhook_id}")

    def find_by_id(self, webhook_id: str) -> WebhookRecord:
        """Return the record with the given id.

        Raises:
            WebhookNotFoundError: If no readable record has this id
        """
        _, record = self._locate(webhook_id)
        return record

    def delete_by_id(self, webhook_id: str) -> None:
        """Delete the blob holding the record with the given id.

        Raises:
            WebhookNotFoundError: If no readable record has this id, or its
                blob was removed concurrently
        """
        key, _ = self._locate(webhook_id)
        try:
            self.storage.delete(key)
        except BlobNotFoundError:
            raise WebhookNotFoundError(f"Webhook not found: {webhook_id}")

        logger.info(f"Deleted webhook {webhook_id} ({key})")

    def list_dates(self) -> list[str]:
        """Distinct date folders in the namespace, newest first."""
        dates = {date_prefix_of(key) for key in self.storage.list_keys()}
        dates.discard(None)
        return sorted(dates, reverse=True)
