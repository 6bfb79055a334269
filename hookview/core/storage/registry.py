"""Backend registry for named blob storage backends."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from hookview.core.storage.backends.filesystem_backend import FilesystemBackend
from hookview.core.storage.backends.prefixed_backend import PrefixedBlobBackend
from hookview.core.storage.blob import BlobStorageBackend
from hookview.core.utils.config import (
    ConfigurationError,
    load_and_resolve_config,
    parse_connection_string,
)

logger = logging.getLogger(__name__)


class BackendConfigError(ConfigurationError):
    """Raised when backend configuration is invalid."""

    pass


class BackendNotFoundError(ConfigurationError):
    """Raised when a named backend is not found in configuration."""

    pass


def _build_filesystem(config: dict[str, Any]) -> BlobStorageBackend:
    base_path = config.get("base_path")
    if not base_path:
        raise BackendConfigError("Filesystem backend requires 'base_path'")
    return FilesystemBackend(base_path=Path(base_path))


def _build_minio(config: dict[str, Any]) -> BlobStorageBackend:
    """Build a MinIO backend; a ``connection_string`` fills in endpoint and keys."""
    # Imported lazily so filesystem-only deployments do not need the client
    from hookview.core.storage.backends.minio_backend import MinIOBackend

    settings = dict(config)
    if settings.get("connection_string"):
        settings.update(parse_connection_string(settings["connection_string"]))

    missing = [f for f in MINIO_REQUIRED_FIELDS if not settings.get(f)]
    if missing:
        raise BackendConfigError(
            f"MinIO backend missing required fields: {', '.join(missing)}. "
            "Is the storage connection string configured?"
        )

    return MinIOBackend(
        endpoint=settings["endpoint"],
        access_key=settings["access_key"],
        secret_key=settings["secret_key"],
        bucket=settings["bucket"],
        secure=settings.get("secure", True),
        region=settings.get("region"),
        create_bucket=settings.get("create_bucket", False),
    )


MINIO_REQUIRED_FIELDS = ("endpoint", "access_key", "secret_key", "bucket")

BackendBuilder = Callable[[dict[str, Any]], BlobStorageBackend]

BACKEND_BUILDERS: dict[str, BackendBuilder] = {
    "filesystem": _build_filesystem,
    "minio": _build_minio,
}


class BlobBackendRegistry:
    """Named, cached blob backends.

    A name is a configured entry optionally followed by dotted folders:
    ``webhooks.staging`` is the ``webhooks`` entry scoped to ``staging/``.

    Examples:
        >>> registry = BlobBackendRegistry()
        >>> backend = registry.get_backend("webhooks")
        >>> backend = registry.get_backend("webhooks.staging")
    """

    def __init__(self, configuration: dict[str, dict[str, Any]] | None = None):
        """``configuration`` maps entry names to settings; defaults to configs.blob_backends."""
        if configuration is None:
            configuration = load_and_resolve_config(
                "configs.blob_backends",
                config_name="CONFIGURATION",
                default={},
            )

        self._config = configuration
        self._backend_cache: dict[str, BlobStorageBackend] = {}
        self._lock = threading.Lock()

    def parse_name(self, name: str) -> tuple[str, str]:
        """Parse a backend name into base name and prefix.

        Examples:
            >>> registry.parse_name("webhooks")
            ("webhooks", "")
            >>> registry.parse_name("webhooks.staging.eu")
            ("webhooks", "staging/eu")
        """
        parts = name.split(".")
        base_name = parts[0]
        prefix = "/".join(parts[1:]) if len(parts) > 1 else ""
        return base_name, prefix

    def create_backend(self, config: dict[str, Any]) -> BlobStorageBackend:
        """Build a backend from one resolved configuration entry.

        Raises:
            BackendConfigError: If the type is missing or unknown, or required
                settings are absent
        """
        backend_type = config.get("type")
        if not backend_type:
            raise BackendConfigError("Backend configuration must specify 'type'")

        builder = BACKEND_BUILDERS.get(backend_type)
        if builder is None:
            raise BackendConfigError(f"Unknown backend type: {backend_type}")
        return builder(config)

    def get_backend(self, name: str, use_cache: bool = True) -> BlobStorageBackend:
        """Resolve ``name`` to a backend, building the base entry on first use.

        Raises:
            BackendNotFoundError: The entry before the first dot is not configured
            BackendConfigError: The entry's settings cannot build a backend
        """
        with self._lock:
            if use_cache and name in self._backend_cache:
                return self._backend_cache[name]

            base_name, prefix = self.parse_name(name)

            if base_name not in self._config:
                available = ", ".join(self._config.keys())
                raise BackendNotFoundError(
                    f"Backend '{base_name}' not found in configuration. "
                    f"Available backends: {available or 'none'}"
                )

            if use_cache and base_name in self._backend_cache:
                base_backend = self._backend_cache[base_name]
            else:
                base_backend = self.create_backend(self._config[base_name])
                if use_cache:
                    self._backend_cache[base_name] = base_backend

            backend = PrefixedBlobBackend(base_backend, prefix) if prefix else base_backend

            if use_cache:
                self._backend_cache[name] = backend

        logger.info(f"Created backend for '{name}' (base: {base_name}, prefix: {prefix or 'none'})")
        return backend

    def list_backends(self) -> list[str]:
        """List all configured backend names."""
        return list(self._config.keys())

    def register(self, name: str, config: dict[str, Any]) -> None:
        """Register a new backend configuration, dropping cached instances for it."""
        with self._lock:
            self._config[name] = config
            stale = [k for k in self._backend_cache if k == name or k.startswith(f"{name}.")]
            for key in stale:
                del self._backend_cache[key]

    def clear_cache(self) -> None:
        """Clear the backend instance cache."""
        with self._lock:
            self._backend_cache.clear()


_default_registry: BlobBackendRegistry | None = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> BlobBackendRegistry:
    """Return the process-wide registry, loading configs.blob_backends on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_registry_lock:
            if _default_registry is None:
                _default_registry = BlobBackendRegistry()
    return _default_registry


def get_blob_backend(name: str) -> BlobStorageBackend:
    """Get a blob backend by name from the default registry.

    Examples:
        >>> from hookview.core.storage import get_blob_backend
        >>> backend = get_blob_backend("webhooks")
    """
    return get_default_registry().get_backend(name)
