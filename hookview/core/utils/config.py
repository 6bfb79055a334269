"""Configuration loading utilities using importlib.

Backend configuration lives in plain Python modules (``configs/blob_backends.py``
by default) exposing a ``CONFIGURATION`` dict. This module loads such a module
dynamically, resolves ``"__inherits__"`` relationships between entries, and
parses blob store connection strings.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration is missing, malformed or cannot be resolved."""

    pass


def load_config_from_module(
    module_path: str,
    config_name: str = "CONFIGURATION",
    default: Any | None = None,
) -> Any:
    """Load a configuration object from a Python module using importlib.

    Args:
        module_path: Dotted module path (e.g., "configs.blob_backends")
        config_name: Name of the configuration object to retrieve (default: "CONFIGURATION")
        default: Default value to return if the module or attribute is missing

    Returns:
        The configuration object from the module, or default if loading fails

    Examples:
        >>> config = load_config_from_module("configs.blob_backends")
        >>> custom = load_config_from_module("myapp.custom_config", "SETTINGS")
    """
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        logger.warning(f"Could not import module '{module_path}': {e}")
        return default

    if not hasattr(module, config_name):
        logger.warning(f"Module '{module_path}' does not have attribute '{config_name}'")
        return default

    config = getattr(module, config_name)
    logger.debug(f"Loaded configuration from {module_path}.{config_name}")
    return config


def resolve_config_inheritance(config_dict: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """Resolve inheritance in a configuration dictionary.

    Configurations can inherit from other configurations using the "__inherits__" key.
    Child values override the parent's; the "__inherits__" key itself is dropped.

    Args:
        config_dict: Configuration dictionary with potential inheritance relationships

    Returns:
        Fully resolved configuration dictionary with all inheritance applied

    Raises:
        ConfigurationError: If circular inheritance detected or parent not found

    Examples:
        >>> config = {
        ...     "webhooks": {"type": "minio", "endpoint": "localhost:9000"},
        ...     "archive": {"__inherits__": "webhooks", "bucket": "webhook-archive"}
        ... }
        >>> resolve_config_inheritance(config)["archive"]["endpoint"]
        'localhost:9000'
    """
    resolved_configs: dict[str, dict[str, Any]] = {}

    def _resolve_single(name: str, config: dict[str, Any], visited: list[str]) -> dict[str, Any]:
        if name in visited:
            chain = " -> ".join([*visited, name])
            raise ConfigurationError(f"Circular inheritance detected: {chain}")

        if name in resolved_configs:
            return resolved_configs[name]

        if "__inherits__" not in config:
            resolved = config.copy()
            resolved_configs[name] = resolved
            return resolved

        parent_name = config["__inherits__"]
        if parent_name not in config_dict:
            raise ConfigurationError(
                f"Configuration '{name}' inherits from '{parent_name}', "
                f"but '{parent_name}' not found"
            )

        resolved_parent = _resolve_single(parent_name, config_dict[parent_name], [*visited, name])

        resolved = resolved_parent.copy()
        resolved.update({key: value for key, value in config.items() if key != "__inherits__"})

        logger.debug(f"Resolved inheritance for '{name}' from '{parent_name}'")
        resolved_configs[name] = resolved
        return resolved

    for name, config in config_dict.items():
        if name not in resolved_configs:
            _resolve_single(name, config, [])

    return resolved_configs


def load_and_resolve_config(
    module_path: str,
    config_name: str = "CONFIGURATION",
    default: dict[str, dict[str, Any]] | None = None,
) -> dict[str, dict[str, Any]]:
    """Load configuration from module and resolve all inheritance relationships.

    Args:
        module_path: Dotted module path (e.g., "configs.blob_backends")
        config_name: Name of the configuration object to retrieve
        default: Default value to return if loading fails

    Returns:
        Fully resolved configuration dictionary
    """
    raw_config = load_config_from_module(module_path, config_name, default)

    if raw_config is None or not isinstance(raw_config, dict):
        logger.warning(f"Invalid configuration loaded from {module_path}, using default")
        return default or {}

    resolved = resolve_config_inheritance(raw_config)
    logger.info(f"Loaded and resolved {len(resolved)} configurations from {module_path}")
    return resolved


# Connection string keys and the backend config fields they populate
_CONNECTION_STRING_FIELDS = {
    "endpoint": "endpoint",
    "accesskey": "access_key",
    "secretkey": "secret_key",
    "secure": "secure",
    "region": "region",
}


def parse_connection_string(connection_string: str) -> dict[str, Any]:
    """Parse a ``Key=Value;Key=Value`` blob store connection string.

    Keys are case-insensitive; ``Secure`` is parsed as a boolean.

    Args:
        connection_string: e.g. "Endpoint=localhost:9000;AccessKey=abc;SecretKey=xyz;Secure=false"

    Returns:
        Dict with any of ``endpoint``, ``access_key``, ``secret_key``, ``secure``, ``region``

    Raises:
        ConfigurationError: If a segment is malformed or a key is unknown
    """
    parsed: dict[str, Any] = {}

    for segment in connection_string.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        if "=" not in segment:
            raise ConfigurationError(f"Malformed connection string segment: '{segment}'")

        key, value = segment.split("=", 1)
        field = _CONNECTION_STRING_FIELDS.get(key.strip().lower())
        if field is None:
            raise ConfigurationError(f"Unknown connection string key: '{key.strip()}'")

        value = value.strip()
        if field == "secure":
            parsed[field] = value.lower() in {"1", "true", "yes", "on"}
        else:
            parsed[field] = value

    return parsed
