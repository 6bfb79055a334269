"""Key-scoping wrapper used by the registry for dotted backend names."""

from __future__ import annotations

from dataclasses import replace

from hookview.core.storage.blob import BlobListResult, BlobStorageBackend


class PrefixedBlobBackend(BlobStorageBackend):
    """Expose one folder of another backend as if it were the bucket root.

    ``webhooks.staging`` resolves to the ``webhooks`` backend wrapped with the
    ``staging/`` folder, so date folders and record keys stay relative.
    """

    def __init__(self, backend: BlobStorageBackend, prefix: str = ""):
        self._backend = backend
        folder = prefix.strip("/")
        self._prefix = f"{folder}/" if folder else ""

    @property
    def prefix(self) -> str:
        return self._prefix

    def _scoped(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _unscoped(self, key: str) -> str:
        return key[len(self._prefix):] if key.startswith(self._prefix) else key

    def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        return self._backend.put(self._scoped(key), data, content_type)

    def get(self, key: str) -> bytes:
        return self._backend.get(self._scoped(key))

    def delete(self, key: str) -> None:
        self._backend.delete(self._scoped(key))

    def exists(self, key: str) -> bool:
        return self._backend.exists(self._scoped(key))

    def list_blobs(
        self,
        prefix: str | None = None,
        max_results: int = 1000,
        marker: str | None = None,
    ) -> BlobListResult:
        inner = self._backend.list_blobs(
            self._scoped(prefix or "") or None,
            max_results,
            self._scoped(marker) if marker else None,
        )
        return BlobListResult(
            blobs=[replace(blob, key=self._unscoped(blob.key)) for blob in inner.blobs],
            is_truncated=inner.is_truncated,
            next_marker=self._unscoped(inner.next_marker) if inner.next_marker else None,
        )
