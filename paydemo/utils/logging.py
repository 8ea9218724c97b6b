"""Structured JSON logging for paydemo."""

import json
import logging
import os
import sys
import traceback
from datetime import UTC, datetime
from typing import IO, Any, ClassVar

# Extra fields that must never reach a log sink verbatim
SENSITIVE_KEYS = frozenset(
    {
        "secret",
        "webhook_secret",
        "stripe_api_key",
        "api_key",
        "signature",
        "signature_header",
        "body",
        "payload",
    }
)

REDACTED = "[redacted]"


def redact_secret(value: str, visible: int = 8) -> str:
    """Return a diagnostic hint for a secret: its first characters only.

    Args:
        value: The secret value.
        visible: Number of leading characters to keep.

    Returns:
        Truncated hint such as ``whsec_ab...``, or an empty string.
    """
    if not value:
        return ""
    if len(value) <= visible:
        return "..."
    return f"{value[:visible]}..."


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    # Fields that are part of the standard LogRecord but not useful in JSON output
    RESERVED_ATTRS: ClassVar[set[str]] = {
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
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted string.
        """
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            log_entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        for key, value in record.__dict__.items():
            if key in self.RESERVED_ATTRS or key.startswith("_"):
                continue
            if key in SENSITIVE_KEYS:
                log_entry[key] = REDACTED
                continue
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        return json.dumps(log_entry, default=str)


def configure_logging(name: str = "paydemo", stream: IO[str] | None = None) -> logging.Logger:
    """Configure structured JSON logging for the service.

    Args:
        name: The root logger name.
        stream: Output stream, stderr when omitted.

    Returns:
        Configured logger instance.
    """
    log_level_str = os.environ.get("LOG_LEVEL", "INFO").upper()
    log_level = logging.getLevelNamesMapping().get(log_level_str, logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Reconfiguring (tests, reloads) must not stack handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Get a child logger of the ``paydemo`` root logger."""
    return logging.getLogger(f"paydemo.{module_name}")
