"""
Tests for configuration management.
"""

import json
import logging
import os

import pytest
import yaml
from pydantic import ValidationError

from cosmosrest.core.config_manager import (
    ConfigManager,
    CosmosConfig,
    LogLevel,
    deep_merge,
    env_overrides,
    read_config_file,
)
from cosmosrest.transport.retry import RetryConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep COSMOSREST_* variables from the host out of these tests."""
    for name in list(os.environ):
        if name.startswith("COSMOSREST_"):
            monkeypatch.delenv(name)


class TestCosmosConfig:
    """Test suite for the CosmosConfig model."""

    def test_defaults(self):
        config = CosmosConfig()

        assert config.endpoint == ""
        assert config.debug is False
        assert config.pooled is False
        assert config.timeout == 30.0
        assert config.retry_wait_min == RetryConfig.MIN_WAIT
        assert config.retry_wait_max == RetryConfig.MAX_WAIT
        assert config.retry_max_attempts == RetryConfig.MAX_ATTEMPTS
        assert config.logging.level == LogLevel.WARNING

    def test_endpoint_trailing_slash_is_stripped(self):
        config = CosmosConfig(endpoint="https://acct.documents.azure.com/")
        assert config.endpoint == "https://acct.documents.azure.com"

    def test_negative_wait_is_rejected(self):
        with pytest.raises(ValidationError):
            CosmosConfig(retry_wait_min=-1)

    def test_max_wait_below_min_wait_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            CosmosConfig(retry_wait_min=5, retry_wait_max=1)

        assert "retry_wait_max must not be less than retry_wait_min" in str(exc_info.value)

    def test_zero_waits_are_allowed(self):
        config = CosmosConfig(retry_wait_min=0, retry_wait_max=0)
        assert config.retry_wait_max == 0

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            CosmosConfig(timeout=0)


class TestConfigManager:
    """Test suite for ConfigManager."""

    def test_load_defaults(self):
        config = ConfigManager().load()

        assert isinstance(config, CosmosConfig)
        assert config.master_key == ""

    def test_load_from_yaml(self, tmp_path):
        config_file = tmp_path / "cosmos.yaml"
        config_file.write_text(yaml.dump({
            "endpoint": "https://acct.documents.azure.com",
            "partition_key_struct_field": "tenant",
            "logging": {"level": "DEBUG"},
        }))

        config = ConfigManager().load(config_file=str(config_file))

        assert config.endpoint == "https://acct.documents.azure.com"
        assert config.partition_key_struct_field == "tenant"
        assert config.logging.level == LogLevel.DEBUG

    def test_load_from_json(self, tmp_path):
        config_file = tmp_path / "cosmos.json"
        config_file.write_text(json.dumps({"pooled": True, "timeout": 5}))

        config = ConfigManager().load(config_file=str(config_file))

        assert config.pooled is True
        assert config.timeout == 5.0

    def test_empty_yaml_file(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert ConfigManager().load(config_file=str(config_file)).endpoint == ""

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(config_file="/nonexistent/cosmos.yaml")

    def test_unsupported_file_format(self, tmp_path):
        config_file = tmp_path / "cosmos.txt"
        config_file.write_text("endpoint = x")

        with pytest.raises(ValueError) as exc_info:
            ConfigManager().load(config_file=str(config_file))

        assert "Unsupported config file format" in str(exc_info.value)

    def test_load_from_env_variables(self, monkeypatch):
        monkeypatch.setenv("COSMOSREST_ENDPOINT", "https://env.documents.azure.com")
        monkeypatch.setenv("COSMOSREST_DEBUG", "yes")
        monkeypatch.setenv("COSMOSREST_PARTITION_KEY_FIELD", "customer_id")
        monkeypatch.setenv("COSMOSREST_RETRY_MAX_ATTEMPTS", "7")
        monkeypatch.setenv("COSMOSREST_RETRY_WAIT_MAX", "2.5")
        monkeypatch.setenv("COSMOSREST_LOG_LEVEL", "error")

        config = ConfigManager().load()

        assert config.endpoint == "https://env.documents.azure.com"
        assert config.debug is True
        assert config.partition_key_struct_field == "customer_id"
        assert config.retry_max_attempts == 7
        assert config.retry_wait_max == 2.5
        assert config.logging.level == LogLevel.ERROR

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("COSMOSREST_TIMEOUT", "soon")

        with pytest.raises(ValidationError):
            ConfigManager().load()

    def test_log_level_is_case_insensitive(self):
        config = ConfigManager().load(cli_overrides={"logging": {"level": "debug"}})
        assert config.logging.level == LogLevel.DEBUG

    def test_configuration_precedence(self, tmp_path, monkeypatch):
        """CLI > ENV > FILE > DEFAULTS."""
        config_file = tmp_path / "cosmos.yaml"
        config_file.write_text(yaml.dump({
            "endpoint": "https://file.documents.azure.com",
            "timeout": 10,
            "logging": {"level": "INFO", "format": "json"},
        }))
        monkeypatch.setenv("COSMOSREST_ENDPOINT", "https://env.documents.azure.com")
        monkeypatch.setenv("COSMOSREST_TIMEOUT", "20")

        config = ConfigManager().load(
            config_file=str(config_file),
            cli_overrides={"timeout": 40, "logging": {"level": "ERROR"}},
        )

        assert config.endpoint == "https://env.documents.azure.com"
        assert config.timeout == 40.0
        assert config.logging.level == LogLevel.ERROR
        # Nested sections are merged, not replaced
        assert config.logging.format == "json"

    def test_invalid_override_raises(self):
        with pytest.raises(ValidationError):
            ConfigManager().load(cli_overrides={"retry_wait_min": -3})

    def test_get_config_before_load(self):
        with pytest.raises(RuntimeError) as exc_info:
            ConfigManager().get_config()

        assert "Configuration not loaded" in str(exc_info.value)

    def test_get_config_after_load(self):
        manager = ConfigManager()
        config = manager.load()

        assert manager.get_config() is config

    def test_reload_keeps_file_and_overrides(self, tmp_path):
        config_file = tmp_path / "cosmos.yaml"
        config_file.write_text(yaml.dump({"timeout": 5, "pooled": False}))

        manager = ConfigManager()
        first = manager.load(config_file=str(config_file), cli_overrides={"debug": True})
        assert first.timeout == 5.0

        config_file.write_text(yaml.dump({"timeout": 6, "pooled": True}))
        second = manager.reload()

        assert second.timeout == 6.0
        assert second.pooled is True
        assert second.debug is True

    def test_master_key_is_redacted_in_log(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="cosmosrest.core.config_manager"):
            ConfigManager().load(cli_overrides={"master_key": "c2VjcmV0LWtleQ=="})

        assert "Active configuration" in caplog.text
        assert "c2VjcmV0LWtleQ==" not in caplog.text
        assert "***REDACTED***" in caplog.text


class TestHelpers:
    """Test suite for the loading helpers."""

    def test_env_overrides_builds_nested_sections(self, monkeypatch):
        monkeypatch.setenv("COSMOSREST_POOLED", "1")
        monkeypatch.setenv("COSMOSREST_LOG_FILE", "/tmp/cosmosrest.log")

        assert env_overrides() == {"pooled": "1", "logging": {"file": "/tmp/cosmosrest.log"}}

    def test_empty_env_values_are_ignored(self, monkeypatch):
        monkeypatch.setenv("COSMOSREST_ENDPOINT", "")
        assert env_overrides() == {}

    def test_deep_merge_does_not_mutate_inputs(self):
        base = {"timeout": 5, "logging": {"level": "INFO", "format": "json"}}
        override = {"logging": {"level": "ERROR"}}

        merged = deep_merge(base, override)

        assert merged == {"timeout": 5, "logging": {"level": "ERROR", "format": "json"}}
        assert base["logging"]["level"] == "INFO"

    def test_read_config_file_json(self, tmp_path):
        config_file = tmp_path / "cosmos.json"
        config_file.write_text('{"endpoint": "https://acct"}')

        assert read_config_file(str(config_file)) == {"endpoint": "https://acct"}
