"""Logging utilities for scopetree.

This module provides:
- Logging configuration from ScopeTreeConfig
- Safe, length-bounded previews of scope lists for log messages
- A formatter that carries permit context (actor, scope) in JSON or plain text
- A logger adapter that tags every record with the permit's actor
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import LogLevel, ScopeTreeConfig

# LogRecord attributes that are not user-supplied extras
_RECORD_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "actor",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a single-line, length-bounded preview of a value for logging.

    Scope lists can be long (a whole application tree); log lines should not be.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple, set, frozenset)):
        if isinstance(value, (set, frozenset)):
            value = sorted(value, key=str)
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    # Normalize whitespace
    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class ScopeTreeFormatter(logging.Formatter):
    """Formatter that includes the permit actor and structured extras.

    This formatter:
    - Extracts ``actor`` from log records (if available)
    - Formats logs as JSON or plain text
    - Includes safe previews of extra fields
    """

    def __init__(
        self,
        include_actor: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        """Initialize the formatter.

        Args:
            include_actor: Whether to include the permit actor in logs
            json_format: Whether to output JSON (True) or plain text (False)
        """
        super().__init__(*args, **kwargs)
        self.include_actor = include_actor
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        actor = getattr(record, "actor", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_actor and actor:
            log_data["actor"] = str(actor)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if "actor" in log_data:
            parts.append(f"actor={log_data['actor']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class PermitLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds the permit actor to every record.

    Usage:
        logger = get_permit_logger(__name__, actor="user-42")
        logger.debug("Granted %s", scopes)
    """

    def __init__(self, logger: logging.Logger, actor: Optional[str] = None):
        super().__init__(logger, {})
        self.actor = actor

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Process log message and add the actor."""
        actor = kwargs.pop("actor", self.actor)

        extra = kwargs.get("extra", {})
        if actor:
            extra["actor"] = actor
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[ScopeTreeConfig] = None,
    json_format: Optional[bool] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Configure logging from a ScopeTreeConfig.

    Args:
        config: ScopeTreeConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        logger_name: Configure this logger instead of the root logger
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)
    if json_format is None:
        json_format = config.log_json

    target = logging.getLogger(logger_name)
    target.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in target.handlers[:]:
        target.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(ScopeTreeFormatter(include_actor=True, json_format=json_format))
    target.addHandler(console_handler)


def get_permit_logger(name: str, actor: Optional[str] = None) -> PermitLoggerAdapter:
    """Get a logger adapter tagged with a permit actor.

    Args:
        name: Logger name (typically __name__)
        actor: Optional actor label to include in all records
    """
    return PermitLoggerAdapter(logging.getLogger(name), actor=actor)


__all__ = [
    "safe_preview",
    "ScopeTreeFormatter",
    "PermitLoggerAdapter",
    "setup_logging",
    "get_permit_logger",
]
