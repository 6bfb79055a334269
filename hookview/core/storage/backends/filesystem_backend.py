"""Blob backend over a local directory tree, used for development and tests."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from hookview.core.storage.blob import (
    BlobListResult,
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBackend,
    BlobStorageError,
)

logger = logging.getLogger(__name__)


class FilesystemBackend(BlobStorageBackend):
    """Each blob is a plain file below ``base_path``.

    The key is the relative POSIX path. Content types are not persisted.
    """

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path).resolve()
        self._base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized filesystem backend at: {self._base_path}")

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _get_blob_path(self, key: str) -> Path:
        """Resolve ``key`` below base_path; keys that escape it are rejected."""
        blob_path = (self._base_path / Path(key).as_posix()).resolve()
        if blob_path == self._base_path or self._base_path not in blob_path.parents:
            raise BlobStorageError(f"Invalid blob key: {key}")
        return blob_path

    def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        blob_path = self._get_blob_path(key)
        try:
            blob_path.parent.mkdir(parents=True, exist_ok=True)
            blob_path.write_bytes(data)
        except OSError as e:
            raise BlobStorageError(f"Failed to store blob {key}: {e}")

        # mtime in microseconds stands in for an etag
        etag = str(int(blob_path.stat().st_mtime * 1000000))
        logger.info(f"Stored blob: {key} ({len(data)} bytes)")
        return etag

    def get(self, key: str) -> bytes:
        blob_path = self._get_blob_path(key)
        try:
            return blob_path.read_bytes()
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob not found: {key}")
        except OSError as e:
            raise BlobStorageError(f"Failed to retrieve blob {key}: {e}")

    def delete(self, key: str) -> None:
        blob_path = self._get_blob_path(key)
        try:
            blob_path.unlink()
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob not found: {key}")
        except OSError as e:
            raise BlobStorageError(f"Failed to delete blob {key}: {e}")

        self._cleanup_empty_dirs(blob_path.parent)
        logger.info(f"Deleted blob: {key}")

    def _cleanup_empty_dirs(self, path: Path) -> None:
        """Drop directories emptied by a delete, e.g. a date folder with no records left."""
        while path != self._base_path and path.exists():
            if any(path.iterdir()):
                break
            try:
                path.rmdir()
            except OSError:
                # A concurrent writer repopulated the directory
                break
            path = path.parent

    def exists(self, key: str) -> bool:
        return self._get_blob_path(key).is_file()

    def list_blobs(
        self,
        prefix: str | None = None,
        max_results: int = 1000,
        marker: str | None = None,
    ) -> BlobListResult:
        """Keys come back in string order, which is what ``marker`` compares against."""
        # Narrow the walk to the deepest directory named by the prefix
        search_path = self._base_path
        if prefix and "/" in prefix:
            search_path = self._base_path / prefix.rsplit("/", 1)[0]

        if not search_path.is_dir():
            return BlobListResult(blobs=[], is_truncated=False, next_marker=None)

        try:
            # Sort on the key string so that markers compare the same way
            candidates = sorted(
                (path.relative_to(self._base_path).as_posix(), path)
                for path in search_path.rglob("*")
                if path.is_file()
            )
        except OSError as e:
            raise BlobStorageError(f"Failed to list blobs: {e}")

        blobs = []
        for rel_path, path in candidates:
            if prefix and not rel_path.startswith(prefix):
                continue
            if marker is not None and rel_path <= marker:
                continue

            if len(blobs) == max_results:
                return BlobListResult(blobs=blobs, is_truncated=True, next_marker=blobs[-1].key)

            try:
                stat = path.stat()
            except FileNotFoundError:
                # Deleted between the walk and the stat
                continue
            blobs.append(
                BlobMetadata(
                    key=rel_path,
                    size=stat.st_size,
                    last_modified=datetime.fromtimestamp(stat.st_mtime),
                )
            )

        return BlobListResult(blobs=blobs, is_truncated=False, next_marker=None)
