"""Blob storage abstraction for webhook request records.

Provides a high-level interface over a flat object namespace with support for
various backends (MinIO/S3, local filesystem). Records are stored as
individual JSON blobs; this layer only deals with keys and bytes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime


@dataclass
class BlobMetadata:
    """Metadata for a stored blob."""

    key: str
    size: int
    last_modified: datetime | None
    etag: str | None = None


@dataclass
class BlobListResult:
    """One page of a blob listing."""

    blobs: list[BlobMetadata]
    is_truncated: bool
    next_marker: str | None


class BlobStorageBackend(ABC):
    """A flat key space of byte blobs, such as a bucket or a directory tree.

    Keys use ``/`` as separator. Listing order is backend specific, so callers
    that need an order must sort for themselves.
    """

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        """Write ``data`` under ``key``, replacing any existing blob; returns an etag."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Read the blob at ``key``.

        Raises:
            BlobNotFoundError: No blob is stored under ``key``
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the blob at ``key``.

        Raises:
            BlobNotFoundError: No blob is stored under ``key``
        """

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def list_blobs(
        self,
        prefix: str | None = None,
        max_results: int = 1000,
        marker: str | None = None,
    ) -> BlobListResult:
        """Return one page of blobs whose key starts with ``prefix``.

        ``marker`` is the ``next_marker`` of the previous page; a page with
        ``is_truncated`` false is the last one.
        """


class BlobStorage:
    """Backend-independent access used by the record loader and seed script."""

    def __init__(self, backend: BlobStorageBackend):
        self._backend = backend

    @property
    def backend(self) -> BlobStorageBackend:
        return self._backend

    def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        return self._backend.put(key, data, content_type)

    def get(self, key: str) -> bytes:
        return self._backend.get(key)

    def delete(self, key: str) -> None:
        self._backend.delete(key)

    def exists(self, key: str) -> bool:
        return self._backend.exists(key)

    def list(self, prefix: str | None = None, max_results: int = 1000) -> Iterator[BlobMetadata]:
        """Yield every blob under ``prefix``, fetching ``max_results`` per page."""
        marker = None
        while True:
            page = self._backend.list_blobs(prefix, max_results, marker)
            yield from page.blobs
            if not page.is_truncated:
                return
            marker = page.next_marker

    def list_keys(self, prefix: str | None = None) -> Iterator[str]:
        return (blob.key for blob in self.list(prefix))


# Custom exceptions


class BlobStorageError(Exception):
    """A backend operation failed."""

    pass


class BlobNotFoundError(BlobStorageError):
    """No blob is stored under the requested key."""

    pass


class BlobStorageConnectionError(BlobStorageError):
    """The backend could not be reached or its bucket is missing."""

    pass
