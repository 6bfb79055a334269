"""Tests for MinIO backend implementation."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import Mock, patch

import pytest
from minio.error import InvalidResponseError, S3Error, ServerError

from hookview.core.storage.backends.minio_backend import MinIOBackend
from hookview.core.storage.blob import (
    BlobNotFoundError,
    BlobStorageConnectionError,
    BlobStorageError,
)


def _s3_error(code: str, resource: str = "/test.json") -> S3Error:
    return S3Error(
        code=code,
        message=code,
        resource=resource,
        request_id="",
        host_id="",
        response=None,
    )


def _object(name: str, size: int = 100, is_dir: bool = False) -> Mock:
    obj = Mock()
    obj.object_name = name
    obj.size = size
    obj.last_modified = datetime(2024, 5, 1)
    obj.etag = f"etag-{name}"
    obj.is_dir = is_dir
    return obj


class TestMinIOBackendInit:
    """Test MinIO backend initialization."""

    @patch("hookview.core.storage.backends.minio_backend.Minio")
    def test_init_with_existing_bucket(self, mock_minio_class):
        """Test initialization with existing bucket."""
        mock_client = Mock()
        mock_client.bucket_exists.return_value = True
        mock_minio_class.return_value = mock_client

        backend = MinIOBackend(
            endpoint="localhost:9000",
            access_key="test_key",
            secret_key="test_secret",
            bucket="webhook-requests",
            secure=False,
        )

        mock_client.bucket_exists.assert_called_once_with("webhook-requests")
        mock_client.make_bucket.assert_not_called()
        assert backend.bucket == "webhook-requests"

    @patch("hookview.core.storage.backends.minio_backend.Minio")
    def test_init_missing_bucket_raises(self, mock_minio_class):
        """A missing bucket is a connection error unless creation is requested."""
        mock_client = Mock()
        mock_client.bucket_exists.return_value = False
        mock_minio_class.return_value = mock_client

        with pytest.raises(BlobStorageConnectionError):
            MinIOBackend(
                endpoint="localhost:9000",
                access_key="key",
                secret_key="secret",
                bucket="webhook-requests",
            )

        mock_client.make_bucket.assert_not_called()

    @patch("hookview.core.storage.backends.minio_backend.Minio")
    def test_init_creates_bucket_when_asked(self, mock_minio_class):
        """Test bucket creation with region parameter."""
        mock_client = Mock()
        mock_client.bucket_exists.return_value = False
        mock_minio_class.return_value = mock_client

        MinIOBackend(
            endpoint="s3.amazonaws.com",
            access_key="key",
            secret_key="secret",
            bucket="bucket",
            region="us-west-2",
            create_bucket=True,
        )

        mock_client.make_bucket.assert_called_once_with("bucket", location="us-west-2")

    @patch("hookview.core.storage.backends.minio_backend.Minio")
    def test_init_connection_error(self, mock_minio_class):
        """Test connection error during initialization."""
        mock_client = Mock()
        mock_client.bucket_exists.side_effect = _s3_error("AccessDenied", "/")
        mock_minio_class.return_value = mock_client

        with pytest.raises(BlobStorageConnectionError):
            MinIOBackend(
                endpoint="localhost:9000",
                access_key="key",
                secret_key="secret",
                bucket="bucket",
            )


class TestMinIOBackendOperations:
    """Test MinIO backend blob operations."""

    @pytest.fixture
    def mock_backend(self):
        """Create a MinIO backend with mocked client."""
        with patch("hookview.core.storage.backends.minio_backend.Minio") as mock_minio_class:
            mock_client = Mock()
            mock_client.bucket_exists.return_value = True
            mock_minio_class.return_value = mock_client

            backend = MinIOBackend(
                endpoint="localhost:9000",
                access_key="test_key",
                secret_key="test_secret",
                bucket="test-bucket",
            )

            # Store mock client for access in tests
            backend._test_mock_client = mock_client

            yield backend

    def test_put_bytes(self, mock_backend):
        """Test storing bytes data."""
        mock_result = Mock()
        mock_result.etag = "abc123"
        mock_backend._test_mock_client.put_object.return_value = mock_result

        data = b'{"id": "1"}'
        etag = mock_backend.put("2024-05-01/1.json", data, content_type="application/json")

        assert etag == "abc123"
        call_args = mock_backend._test_mock_client.put_object.call_args
        assert call_args.kwargs["bucket_name"] == "test-bucket"
        assert call_args.kwargs["object_name"] == "2024-05-01/1.json"
        assert call_args.kwargs["length"] == len(data)
        assert call_args.kwargs["content_type"] == "application/json"

    def test_put_error(self, mock_backend):
        """Test error handling during put."""
        mock_backend._test_mock_client.put_object.side_effect = _s3_error("AccessDenied")

        with pytest.raises(BlobStorageError):
            mock_backend.put("test.json", b"data")

    def test_get(self, mock_backend):
        """Test retrieving blob data."""
        mock_response = Mock()
        mock_response.read.return_value = b"retrieved data"
        mock_backend._test_mock_client.get_object.return_value = mock_response

        data = mock_backend.get("test.json")

        assert data == b"retrieved data"
        mock_backend._test_mock_client.get_object.assert_called_once_with(
            "test-bucket", "test.json"
        )
        mock_response.close.assert_called_once()
        mock_response.release_conn.assert_called_once()

    def test_get_not_found(self, mock_backend):
        """Test getting non-existent blob."""
        mock_backend._test_mock_client.get_object.side_effect = _s3_error("NoSuchKey")

        with pytest.raises(BlobNotFoundError):
            mock_backend.get("test.json")

    def test_get_other_error(self, mock_backend):
        """Other S3 errors are storage errors, not not-found."""
        mock_backend._test_mock_client.get_object.side_effect = _s3_error("AccessDenied")

        with pytest.raises(BlobStorageError) as exc_info:
            mock_backend.get("test.json")

        assert not isinstance(exc_info.value, BlobNotFoundError)

    @pytest.mark.parametrize(
        "error",
        [
            ServerError("server failed with HTTP status code 500", 500),
            InvalidResponseError(503, "text/html", "<html>Service Unavailable</html>"),
        ],
    )
    def test_get_non_s3_client_errors(self, mock_backend, error):
        """Bare 5xx and non-XML answers surface as storage errors."""
        mock_backend._test_mock_client.get_object.side_effect = error

        with pytest.raises(BlobStorageError) as exc_info:
            mock_backend.get("test.json")

        assert not isinstance(exc_info.value, BlobNotFoundError)

    def test_exists_server_error(self, mock_backend):
        mock_backend._test_mock_client.stat_object.side_effect = ServerError("boom", 502)

        with pytest.raises(BlobStorageError):
            mock_backend.exists("test.json")

    def test_delete(self, mock_backend):
        """Test deleting a blob."""
        mock_backend.delete("test.json")

        mock_backend._test_mock_client.remove_object.assert_called_once_with(
            "test-bucket", "test.json"
        )

    def test_delete_not_found(self, mock_backend):
        """Deleting a missing key reports it instead of silently succeeding."""
        mock_backend._test_mock_client.stat_object.side_effect = _s3_error("NoSuchKey")

        with pytest.raises(BlobNotFoundError):
            mock_backend.delete("test.json")

        mock_backend._test_mock_client.remove_object.assert_not_called()

    def test_exists_true(self, mock_backend):
        """Test checking blob existence when it exists."""
        mock_backend._test_mock_client.stat_object.return_value = Mock()

        assert mock_backend.exists("test.json") is True

    def test_exists_false(self, mock_backend):
        """Test checking blob existence when it doesn't exist."""
        mock_backend._test_mock_client.stat_object.side_effect = _s3_error("NoSuchKey")

        assert mock_backend.exists("test.json") is False

    def test_list_blobs(self, mock_backend):
        """Test listing blobs, skipping directory entries."""
        mock_backend._test_mock_client.list_objects.return_value = iter(
            [_object("2024-05-01/a.json"), _object("2024-05-01/", is_dir=True), _object("b.json")]
        )

        result = mock_backend.list_blobs()

        assert [b.key for b in result.blobs] == ["2024-05-01/a.json", "b.json"]
        assert result.blobs[0].etag == "etag-2024-05-01/a.json"
        assert result.is_truncated is False

    def test_list_blobs_with_prefix_and_marker(self, mock_backend):
        """Prefix and marker are passed through to the client."""
        mock_backend._test_mock_client.list_objects.return_value = iter([])

        mock_backend.list_blobs(prefix="2024-05-01/", marker="2024-05-01/a.json")

        call_args = mock_backend._test_mock_client.list_objects.call_args
        assert call_args.kwargs["prefix"] == "2024-05-01/"
        assert call_args.kwargs["recursive"] is True
        assert call_args.kwargs["start_after"] == "2024-05-01/a.json"

    def test_list_blobs_truncated(self, mock_backend):
        """Test listing with truncation."""
        mock_backend._test_mock_client.list_objects.return_value = iter(
            [_object(f"file{i:04d}.json") for i in range(11)]
        )

        result = mock_backend.list_blobs(max_results=10)

        assert len(result.blobs) == 10
        assert result.is_truncated is True
        assert result.next_marker == "file0009.json"

    def test_list_blobs_error(self, mock_backend):
        """Listing failures surface as storage errors."""
        mock_backend._test_mock_client.list_objects.side_effect = _s3_error("AccessDenied", "/")

        with pytest.raises(BlobStorageError):
            mock_backend.list_blobs()
