"""Storage backend implementations."""

from hookview.core.storage.backends.filesystem_backend import FilesystemBackend
from hookview.core.storage.backends.prefixed_backend import PrefixedBlobBackend

__all__ = [
    "FilesystemBackend",
    "PrefixedBlobBackend",
]

# The MinIO client is an optional import for filesystem-only deployments
try:
    from hookview.core.storage.backends.minio_backend import MinIOBackend

    __all__.append("MinIOBackend")
except ImportError:
    pass
