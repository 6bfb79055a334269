"""Utility functions for hookview."""

from hookview.core.utils.config import (
    ConfigurationError,
    load_and_resolve_config,
    load_config_from_module,
    parse_connection_string,
    resolve_config_inheritance,
)
from hookview.core.utils.env import load_env_file_if_present

__all__ = [
    "load_env_file_if_present",
    "load_config_from_module",
    "load_and_resolve_config",
    "resolve_config_inheritance",
    "parse_connection_string",
    "ConfigurationError",
]
