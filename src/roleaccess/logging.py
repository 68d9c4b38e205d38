"""Centralized logging utilities for roleaccess.

This module provides:
- Logging configuration from RoleAccessConfig
- Safe preview utility for directive values and metadata text
- Structured logging with action/role context
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import LogLevel, RoleAccessConfig

_CONTEXT_FIELDS = ("action", "role")

_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", *_CONTEXT_FIELDS,
}


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a safe, length-bounded preview of a value for logging.

    Converts any value to a single-line string with normalized
    whitespace, truncated to ``limit`` characters.
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class RoleAccessFormatter(logging.Formatter):
    """Formatter that includes action/role context and optional JSON output."""

    def __init__(
        self,
        include_context: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_context = include_context
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: dict[str, str] = {}
        if self.include_context:
            for key in _CONTEXT_FIELDS:
                value = getattr(record, key, None)
                if value:
                    context[key] = str(value)
            log_data.update(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        parts.extend(f"{key}={value}" for key, value in context.items())
        parts.append(f": {log_data['message']}")
        text = " ".join(parts)
        if "exception" in log_data:
            text = f"{text}\n{log_data['exception']}"
        return text


class AccessLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds action and role to every record.

    Usage:
        logger = get_access_logger(__name__, action="edit")
        logger.info("Resolved directive", role="editor")
    """

    def __init__(
        self,
        logger: logging.Logger,
        action: Optional[str] = None,
        role: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.action = action
        self.role = role

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        action = kwargs.pop("action", self.action)
        role = kwargs.pop("role", self.role)

        extra = kwargs.get("extra", {})
        if action:
            extra["action"] = action
        if role:
            extra["role"] = role
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[RoleAccessConfig] = None,
    json_format: Optional[bool] = None,
    service_name: Optional[str] = None,
) -> None:
    """Configure the root logger from RoleAccessConfig.

    Args:
        config: RoleAccessConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        service_name: Optional service logger to set to the same level
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

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        RoleAccessFormatter(
            include_context=True,
            json_format=config.log_json if json_format is None else json_format,
        )
    )
    root_logger.addHandler(console_handler)

    if service_name:
        logging.getLogger(service_name).setLevel(log_level)


def get_access_logger(
    name: str,
    action: Optional[str] = None,
    role: Optional[str] = None,
) -> AccessLoggerAdapter:
    """Get a logger adapter bound to an action and/or role."""
    return AccessLoggerAdapter(logging.getLogger(name), action=action, role=role)


__all__ = [
    "safe_preview",
    "RoleAccessFormatter",
    "AccessLoggerAdapter",
    "setup_logging",
    "get_access_logger",
]
