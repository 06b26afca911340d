"""
Structured logging configuration using structlog.

Provides consistent, structured logging across all modules. Ledger and
result paths show up in almost every event, so home directories are
redacted unless disabled in settings.
"""

import logging
import re
import sys
from typing import Any

import structlog

from hush.shared.infrastructure.config import settings

_HOME_PATTERNS = (
    re.compile(r"/Users/[^/\s]+"),
    re.compile(r"/home/[^/\s]+"),
    re.compile(r"[A-Za-z]:\\Users\\[^\\\s]+"),
)


def _redact(value: Any) -> Any:
    if isinstance(value, str):
        for pattern in _HOME_PATTERNS:
            value = pattern.sub("[HOME_REDACTED]", value)
        return value
    if isinstance(value, dict):
        return {k: _redact(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact(v) for v in value]
    return value


def path_redactor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Redact home directory prefixes from every string in the event.

    Args:
        logger: Logger instance
        method_name: Logging method name
        event_dict: Event dictionary to process

    Returns:
        Redacted event dictionary
    """
    if not settings.log_redaction_enabled:
        return event_dict
    return {key: _redact(value) for key, value in event_dict.items()}


def configure_logging(stream: Any = None, level: str | None = None) -> None:
    """
    Configure structlog for the application.

    Sets up:
    - Pretty console output for development
    - JSON output otherwise
    - Log level from settings (or the explicit override)
    """
    stream = stream or sys.stderr

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        path_redactor,
    ]

    if settings.is_development:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=stream.isatty() if hasattr(stream, "isatty") else False),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, (level or settings.log_level).upper()),
        force=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("ledger_loaded", path="hush-suppressions.json", files=3)
    """
    return structlog.get_logger(name)
