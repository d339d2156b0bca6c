"""
Logging infrastructure for cosmosrest.

Structured (JSON) or text output on stderr and optionally a rotating file.
Every handler carries a SensitiveDataFilter so master keys and request
signatures never reach a log sink, including the curl lines debug mode emits.
"""

import json
import logging
import logging.handlers
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

REDACTED = "***REDACTED***"

_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*(B|KB|MB|GB)?$")
_SIZE_UNITS = {None: 1, "B": 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


class SensitiveDataFilter(logging.Filter):
    """Redact authorization tokens and master keys from messages and context."""

    PATTERNS = [
        (re.compile(r'(Authorization["\']?\s*[:=]\s*["\']?)[^\s"\',]+', re.IGNORECASE), r'\1' + REDACTED),
        (re.compile(r'(sig(?:=|%3D))[^;&\s"\']+', re.IGNORECASE), r'\1' + REDACTED),
        (re.compile(r'(master_?key["\']?\s*[:=]\s*["\']?)[^\s"\',]+', re.IGNORECASE), r'\1' + REDACTED),
        (re.compile(r'(AccountKey=)[^;]+', re.IGNORECASE), r'\1' + REDACTED),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.redact(record.msg)
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            record.context = {key: self._redact_value(value) for key, value in context.items()}
        return True

    @classmethod
    def redact(cls, text: str) -> str:
        for pattern, replacement in cls.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    @classmethod
    def _redact_value(cls, value: Any) -> Any:
        if isinstance(value, str):
            return cls.redact(value)
        if isinstance(value, dict):
            # header maps: the Authorization value is dropped whole
            return {
                key: REDACTED if str(key).lower() == "authorization" else cls._redact_value(item)
                for key, item in value.items()
            }
        return value


class JSONFormatter(logging.Formatter):
    """One JSON object per record; request context is nested under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line text; request context is appended as ``[key=value ...]``."""

    FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self):
        super().__init__(fmt=self.FORMAT, datefmt=self.DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = getattr(record, "context", None)
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            text = f"{text} [{pairs}]"
        return text


def setup_logging(
    level: str = "INFO",
    format_type: str = "text",
    log_file: Optional[str] = None,
    rotation_size: str = "10MB",
    rotation_count: int = 5,
    module_levels: Optional[Dict[str, str]] = None
) -> None:
    """
    Configure the root logger for cosmosrest.

    Replaces any handlers already installed on the root logger.

    Args:
        level: Root log level name
        format_type: "json" or "text"
        log_file: Also write to this file, rotated by size
        rotation_size: Rotation threshold such as "10MB"
        rotation_count: Rotated files to keep
        module_levels: Per-logger levels, e.g. {"cosmosrest.transport": "DEBUG"}

    Raises:
        ValueError: If ``rotation_size`` cannot be parsed
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(_level(level))
    root_logger.handlers.clear()

    formatter = JSONFormatter() if format_type == "json" else TextFormatter()

    # stderr keeps command output on stdout machine readable
    _attach(root_logger, logging.StreamHandler(sys.stderr), formatter)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=_parse_size(rotation_size),
            backupCount=rotation_count,
            encoding="utf-8",
        )
        _attach(root_logger, handler, formatter)
        root_logger.debug(f"Logging to file: {log_file} (rotation: {rotation_size}, count: {rotation_count})")

    for module_name, module_level in (module_levels or {}).items():
        logging.getLogger(module_name).setLevel(_level(module_level))
        root_logger.debug(f"Module '{module_name}' log level set to {module_level}")

    root_logger.debug(f"Logging configured: level={level}, format={format_type}")


def configure_logging(config: Any, level: Optional[str] = None) -> None:
    """
    Apply a ``LoggingConfig`` section.

    Args:
        config: LoggingConfig from the loaded CosmosConfig
        level: Level that takes precedence over ``config.level``
    """
    setup_logging(
        level=level or str(config.level),
        format_type=config.format,
        log_file=config.file,
        rotation_size=config.rotation_size,
        rotation_count=config.rotation_count,
        module_levels=config.module_levels,
    )


def _attach(root_logger: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(handler)


def _level(name: str) -> int:
    value = logging.getLevelName(name.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {name}")
    return value


def _parse_size(size_str: str) -> int:
    """
    Parse a rotation size such as "10MB", "512 KB" or "2048" into bytes.

    Raises:
        ValueError: If the string is not a number with an optional B/KB/MB/GB unit
    """
    match = _SIZE_RE.match(size_str.strip().upper())
    if not match:
        raise ValueError(f"Invalid size: {size_str!r}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit])


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """
    Log a message with structured context (resource id, status, headers...).

    The context is attached to the record as ``record.context`` and rendered
    by both formatters.
    """
    extra = {"context": context} if context else {}
    logger.log(level, message, extra=extra)
