"""Blob backend for MinIO and other S3-compatible object stores."""

from __future__ import annotations

import logging
from io import BytesIO

from minio import Minio
from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError

from hookview.core.storage.blob import (
    BlobListResult,
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBackend,
    BlobStorageConnectionError,
    BlobStorageError,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchObject"}


def _is_not_found(exc: Exception) -> bool:
    return isinstance(exc, S3Error) and exc.code in _NOT_FOUND_CODES


def _storage_error(action: str, key: str, exc: Exception) -> BlobStorageError:
    """Map a client failure on ``key`` to the storage error hierarchy."""
    if _is_not_found(exc):
        return BlobNotFoundError(f"Blob not found: {key}")
    return BlobStorageError(f"Failed to {action} blob {key}: {exc}")


class MinIOBackend(BlobStorageBackend):
    """Keys map one-to-one onto object names in a single bucket.

    The bucket must exist unless ``create_bucket`` is set; a missing or
    unreachable bucket raises BlobStorageConnectionError from the constructor.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        secure: bool = True,
        region: str | None = None,
        create_bucket: bool = False,
    ):
        self._bucket = bucket
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )

        try:
            found = self._client.bucket_exists(bucket)
            if not found and create_bucket:
                self._client.make_bucket(bucket, location=region)
                logger.info(f"Created bucket: {bucket}")
                found = True
        except (MinioException, HTTPError) as e:
            raise BlobStorageConnectionError(f"Failed to connect to MinIO at {endpoint}: {e}")

        if not found:
            raise BlobStorageConnectionError(f"Bucket does not exist: {bucket}")
        logger.debug(f"Using bucket {bucket} at {endpoint}")

    @property
    def bucket(self) -> str:
        return self._bucket

    def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        try:
            result = self._client.put_object(
                bucket_name=self._bucket,
                object_name=key,
                data=BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream",
            )
        except (MinioException, HTTPError) as e:
            raise _storage_error("store", key, e)

        logger.debug(f"Stored blob {key} ({len(data)} bytes)")
        return result.etag

    def get(self, key: str) -> bytes:
        try:
            response = self._client.get_object(self._bucket, key)
        except (MinioException, HTTPError) as e:
            raise _storage_error("retrieve", key, e)

        try:
            return response.read()
        except HTTPError as e:
            raise _storage_error("retrieve", key, e)
        finally:
            response.close()
            response.release_conn()

    def delete(self, key: str) -> None:
        # remove_object succeeds for absent keys, so check first
        if not self.exists(key):
            raise BlobNotFoundError(f"Blob not found: {key}")

        try:
            self._client.remove_object(self._bucket, key)
        except (MinioException, HTTPError) as e:
            raise _storage_error("delete", key, e)
        logger.info(f"Deleted blob: {key}")

    def exists(self, key: str) -> bool:
        try:
            self._client.stat_object(self._bucket, key)
        except (MinioException, HTTPError) as e:
            if _is_not_found(e):
                return False
            raise _storage_error("stat", key, e)
        return True

    def list_blobs(
        self,
        prefix: str | None = None,
        max_results: int = 1000,
        marker: str | None = None,
    ) -> BlobListResult:
        blobs: list[BlobMetadata] = []
        try:
            for obj in self._client.list_objects(
                bucket_name=self._bucket,
                prefix=prefix,
                recursive=True,
                start_after=marker,
            ):
                if obj.is_dir:
                    continue
                # list_objects has no page size; stop one object past the page
                if len(blobs) == max_results:
                    return BlobListResult(blobs=blobs, is_truncated=True, next_marker=blobs[-1].key)
                blobs.append(
                    BlobMetadata(
                        key=obj.object_name,
                        size=obj.size,
                        last_modified=obj.last_modified,
                        etag=obj.etag,
                    )
                )
        except (MinioException, HTTPError) as e:
            raise BlobStorageError(f"Failed to list blobs under {prefix or '/'}: {e}")

        return BlobListResult(blobs=blobs, is_truncated=False, next_marker=None)
