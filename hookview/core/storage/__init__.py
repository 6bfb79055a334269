"""Storage abstractions for the blob namespace holding webhook records."""

from hookview.core.storage.blob import (
    BlobListResult,
    BlobMetadata,
    BlobNotFoundError,
    BlobStorage,
    BlobStorageBackend,
    BlobStorageConnectionError,
    BlobStorageError,
)
from hookview.core.storage.registry import (
    BackendConfigError,
    BackendNotFoundError,
    BlobBackendRegistry,
    get_blob_backend,
    get_default_registry,
)

__all__ = [
    # Blob storage
    "BlobStorage",
    "BlobStorageBackend",
    "BlobMetadata",
    "BlobListResult",
    "BlobStorageError",
    "BlobNotFoundError",
    "BlobStorageConnectionError",
    # Registry
    "BlobBackendRegistry",
    "BackendConfigError",
    "BackendNotFoundError",
    "get_default_registry",
    "get_blob_backend",
]
