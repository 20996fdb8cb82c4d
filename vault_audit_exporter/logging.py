"""
Structured logging configuration.

This module provides console logging in two flavours:
- Human-readable, level-dependent format (default)
- JSON-formatted structured records for log shippers

Connection-scoped fields (such as the audit peer address) are carried in a
context variable, so every record emitted while serving a connection
includes them.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any

from vault_audit_exporter.settings import app_settings

LOGGER_NAME = "vault_audit_exporter"

# Context variables for storing connection-specific logging context
log_context: ContextVar[dict[str, Any] | None] = ContextVar(
    "log_context", default=None
)

# LogRecord attributes that are not user supplied "extra" fields
_RESERVED_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "peer",
    }
)


def set_log_context(**kwargs: Any) -> None:
    """
    Set contextual fields for structured logging.

    The fields are attached to every log message emitted from the current
    task (and tasks it creates afterwards).

    Args:
        **kwargs: Key-value pairs to add to log context.

    Example:
        >>> set_log_context(peer="10.0.0.5:51234")
        >>> logger.info("Connection accepted")  # Will include peer
    """
    current = dict(log_context.get() or {})
    current.update(kwargs)
    log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """
    Get current log context.

    Returns:
        Dictionary of contextual log fields.
    """
    return dict(log_context.get() or {})


def clear_log_context() -> None:
    """Clear the log context (useful when a connection closes)."""
    log_context.set(None)


class StructuredJSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    This formatter outputs logs in JSON format with:
    - Standard fields: timestamp, level, logger, message
    - Additional contextual fields from log_context
    - Exception information when present
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON string with structured log data.
        """
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        context = get_log_context()
        if context:
            log_data.update(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable formatter for console output (non-JSON).

    Uses different format strings based on log level for better readability.
    """

    INFO_FMT = "%(asctime)s - [%(peer)s] %(levelname)s: %(message)s"
    ERROR_FMT = "%(asctime)s - [%(peer)s] %(levelname)s: %(module)s.%(funcName)s:%(lineno)d - %(message)s"

    def __init__(self, *args: Any, **kwargs: Any):
        """Initialize the formatter."""
        super().__init__(*args, **kwargs)
        self._formatters = {
            logging.INFO: logging.Formatter(
                self.INFO_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
            logging.WARNING: logging.Formatter(
                self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
            logging.ERROR: logging.Formatter(
                self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
            logging.DEBUG: logging.Formatter(
                self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
        }

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record with the connection peer, if any.

        Args:
            record: The log record to format.

        Returns:
            Formatted log string.
        """
        record.peer = get_log_context().get("peer", "-")

        formatter = self._formatters.get(
            record.levelno, self._formatters[logging.INFO]
        )
        return formatter.format(record)


class _ConsoleHandler(logging.StreamHandler):
    """Marker subclass so setup_logging can replace only its own handler."""


def setup_logging(
    level: str | None = None, log_format: str | None = None
) -> logging.Logger:
    """
    Configure console logging on the root logger.

    Calling it again (e.g. after CLI flags override the environment)
    replaces the previously installed console handler and leaves any
    other handlers alone.

    Args:
        level: Log level name, defaults to LOG_LEVEL.
        log_format: ``text`` or ``json``, defaults to LOG_FORMAT.

    Returns:
        The package logger.
    """
    level = (level or app_settings.LOG_LEVEL).upper()
    log_format = log_format or app_settings.LOG_FORMAT

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))

    for handler in list(root.handlers):
        if isinstance(handler, _ConsoleHandler):
            root.removeHandler(handler)

    console_handler = _ConsoleHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    if log_format == "json":
        console_handler.setFormatter(StructuredJSONFormatter())
    else:
        console_handler.setFormatter(HumanReadableFormatter())
    root.addHandler(console_handler)

    return logging.getLogger(LOGGER_NAME)


# Create default logger instance
logger = setup_logging()
