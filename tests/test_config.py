"""Tests for configuration loading, inheritance resolution and connection strings."""

from __future__ import annotations

import pytest

from hookview.core.utils.config import (
    ConfigurationError,
    load_and_resolve_config,
    load_config_from_module,
    parse_connection_string,
    resolve_config_inheritance,
)


class TestConfigInheritance:
    """Test suite for configuration inheritance resolution."""

    def test_resolve_inheritance_basic(self):
        """Test basic configuration inheritance."""
        config = {
            "webhooks": {
                "type": "minio",
                "connection_string": "Endpoint=localhost:9000",
                "bucket": "webhook-requests",
            },
            "archive": {
                "__inherits__": "webhooks",
                "bucket": "webhook-requests-archive",
            },
        }

        resolved = resolve_config_inheritance(config)

        assert resolved["webhooks"]["bucket"] == "webhook-requests"
        assert resolved["archive"]["type"] == "minio"
        assert resolved["archive"]["connection_string"] == "Endpoint=localhost:9000"
        assert resolved["archive"]["bucket"] == "webhook-requests-archive"
        assert "__inherits__" not in resolved["archive"]

    def test_resolve_inheritance_chain(self):
        """Test a longer inheritance chain."""
        config = {
            "level0": {"type": "filesystem", "val0": "0"},
            "level1": {"__inherits__": "level0", "val1": "1"},
            "level2": {"__inherits__": "level1", "val2": "2"},
        }

        resolved = resolve_config_inheritance(config)

        assert resolved["level2"] == {"type": "filesystem", "val0": "0", "val1": "1", "val2": "2"}

    def test_resolve_inheritance_circular_detection(self):
        """Test that circular inheritance is detected."""
        config = {
            "a": {"__inherits__": "b"},
            "b": {"__inherits__": "a"},
        }

        with pytest.raises(ConfigurationError, match="Circular inheritance detected"):
            resolve_config_inheritance(config)

    def test_resolve_inheritance_self_reference(self):
        """Test that self-referencing inheritance is detected."""
        with pytest.raises(ConfigurationError, match="Circular inheritance detected"):
            resolve_config_inheritance({"a": {"__inherits__": "a"}})

    def test_resolve_inheritance_missing_parent(self):
        """Test error when parent config doesn't exist."""
        config = {"child": {"__inherits__": "nonexistent"}}

        with pytest.raises(
            ConfigurationError, match="inherits from 'nonexistent', but 'nonexistent' not found"
        ):
            resolve_config_inheritance(config)

    def test_resolve_inheritance_empty_config(self):
        assert resolve_config_inheritance({}) == {}


class TestLoadConfig:
    """Loading configuration modules with importlib."""

    def test_missing_module_returns_default(self):
        assert load_config_from_module("configs.does_not_exist", default={"x": 1}) == {"x": 1}

    def test_missing_attribute_returns_default(self):
        assert load_config_from_module("configs.blob_backends", "NOPE", default=None) is None

    def test_load_blob_backends(self):
        """The bundled backend configuration defines the webhooks namespace."""
        resolved = load_and_resolve_config("configs.blob_backends")

        assert "webhooks" in resolved
        assert resolved["local"]["type"] == "filesystem"
        assert resolved["local"]["base_path"].endswith("webhook-requests")


class TestParseConnectionString:
    """Parsing ``Key=Value;...`` storage connection strings."""

    def test_full_connection_string(self):
        parsed = parse_connection_string(
            "Endpoint=minio.local:9000;AccessKey=ak;SecretKey=s=k;Secure=true;Region=eu-west-1"
        )

        assert parsed == {
            "endpoint": "minio.local:9000",
            "access_key": "ak",
            "secret_key": "s=k",
            "secure": True,
            "region": "eu-west-1",
        }

    def test_keys_are_case_insensitive_and_whitespace_tolerant(self):
        parsed = parse_connection_string(" endpoint = localhost:9000 ; SECURE=false ;")

        assert parsed == {"endpoint": "localhost:9000", "secure": False}

    def test_empty_string(self):
        assert parse_connection_string("") == {}

    def test_malformed_segment(self):
        with pytest.raises(ConfigurationError, match="Malformed"):
            parse_connection_string("Endpoint=localhost:9000;garbage")

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown connection string key"):
            parse_connection_string("AccountName=foo")
