"""
Configuration management for cosmosrest.

Handles loading, validation, and access to client configuration settings.
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from cosmosrest.core.logging_config import REDACTED
from cosmosrest.transport.retry import RetryConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "COSMOSREST_"


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.WARNING
    format: str = "text"
    file: Optional[str] = None
    rotation_size: str = "10MB"
    rotation_count: int = 5
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'cosmosrest.transport': 'DEBUG'}"
    )

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class CosmosConfig(BaseModel):
    """Client configuration schema."""

    endpoint: str = Field(default="", description="Account endpoint, e.g. https://acct.documents.azure.com")
    master_key: str = Field(default="", description="Base64-encoded account master key")

    debug: bool = False
    verbose: bool = False

    partition_key_struct_field: str = Field(
        default="",
        description="Attribute (or mapping key) of a body that holds its partition key value"
    )
    partition_key_path: str = Field(
        default="",
        description="Collection partition key path, e.g. '/userId'"
    )

    retry_wait_min: float = Field(default=RetryConfig.MIN_WAIT, ge=0.0)
    retry_wait_max: float = Field(default=RetryConfig.MAX_WAIT, ge=0.0)
    retry_max_attempts: int = Field(default=RetryConfig.MAX_ATTEMPTS, ge=0)

    pooled: bool = False
    timeout: float = Field(default=30.0, gt=0.0, description="Per-request timeout in seconds")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("endpoint")
    @classmethod
    def strip_endpoint(cls, v: str) -> str:
        """Drop the trailing slash so links can be joined onto it."""
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_retry_window(self) -> "CosmosConfig":
        if self.retry_wait_min and self.retry_wait_max and self.retry_wait_max < self.retry_wait_min:
            raise ValueError("retry_wait_max must not be less than retry_wait_min")
        return self


class ConfigManager:
    """
    Loads and validates CosmosConfig.

    Sources, highest precedence first: CLI overrides, ``COSMOSREST_*``
    environment variables, a YAML or JSON file, model defaults. Nested
    sections (``logging``) are merged key by key.
    """

    def __init__(self):
        self._config: Optional[CosmosConfig] = None
        self._config_file: Optional[Path] = None
        self._cli_overrides: Optional[Dict[str, Any]] = None

    def load(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> CosmosConfig:
        """
        Build the configuration from every source.

        Args:
            config_file: YAML (.yaml/.yml) or JSON (.json) file
            cli_overrides: Values from the command line, same shape as the file

        Returns:
            Validated CosmosConfig

        Raises:
            ValidationError: If the merged values do not validate
            FileNotFoundError: If ``config_file`` does not exist
            ValueError: If ``config_file`` has an unknown extension
        """
        layers = []
        if config_file:
            layers.append(("file", read_config_file(config_file)))
            self._config_file = Path(config_file)
        layers.append(("environment", env_overrides()))
        if cli_overrides:
            self._cli_overrides = cli_overrides
            layers.append(("cli", cli_overrides))

        merged: Dict[str, Any] = {}
        for source, values in layers:
            if values:
                logger.debug(f"Applying {len(values)} setting(s) from {source}")
                merged = deep_merge(merged, values)

        try:
            self._config = CosmosConfig(**merged)
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        logger.debug(f"Active configuration: {json.dumps(redacted(self._config), indent=2)}")
        return self._config

    def get_config(self) -> CosmosConfig:
        """
        Return the configuration from the last load().

        Raises:
            RuntimeError: If load() has not been called
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def reload(self) -> CosmosConfig:
        """Load again from the same file and CLI overrides, picking up file and environment changes."""
        config_file = str(self._config_file) if self._config_file else None
        return self.load(config_file=config_file, cli_overrides=self._cli_overrides)


# Environment variable (without prefix) -> config path
ENV_VARS: Dict[str, Tuple[str, ...]] = {
    "ENDPOINT": ("endpoint",),
    "MASTER_KEY": ("master_key",),
    "DEBUG": ("debug",),
    "VERBOSE": ("verbose",),
    "POOLED": ("pooled",),
    "PARTITION_KEY_FIELD": ("partition_key_struct_field",),
    "PARTITION_KEY_PATH": ("partition_key_path",),
    "RETRY_WAIT_MIN": ("retry_wait_min",),
    "RETRY_WAIT_MAX": ("retry_wait_max",),
    "RETRY_MAX_ATTEMPTS": ("retry_max_attempts",),
    "TIMEOUT": ("timeout",),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FILE": ("logging", "file"),
}


def env_overrides() -> Dict[str, Any]:
    """
    Collect ``COSMOSREST_*`` variables into a nested settings dict.

    Values stay strings; CosmosConfig validation converts "true"/"1"/"yes"
    and numbers.
    """
    settings: Dict[str, Any] = {}
    for name, path in ENV_VARS.items():
        value = os.getenv(f"{ENV_PREFIX}{name}")
        if not value:
            continue
        section = settings
        for key in path[:-1]:
            section = section.setdefault(key, {})
        section[path[-1]] = value
    return settings


def read_config_file(file_path: str) -> Dict[str, Any]:
    """Parse a YAML or JSON configuration file; an empty file yields {}."""
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(path, "r") as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif path.suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

    return data or {}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def redacted(config: CosmosConfig) -> Dict[str, Any]:
    """Config as a dict with the master key masked, for logging."""
    data = config.model_dump()
    if data.get("master_key"):
        data["master_key"] = REDACTED
    return data
