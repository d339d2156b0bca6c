"""Core module initialization."""

from .config_manager import ConfigManager, CosmosConfig, LoggingConfig
from .logging_config import SensitiveDataFilter, configure_logging, log_with_context, setup_logging

__all__ = [
    "ConfigManager",
    "CosmosConfig",
    "LoggingConfig",
    "SensitiveDataFilter",
    "configure_logging",
    "log_with_context",
    "setup_logging",
]
