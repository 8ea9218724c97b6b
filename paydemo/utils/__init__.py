"""Utility modules for paydemo."""

from paydemo.utils.logging import JsonFormatter, configure_logging, get_logger, redact_secret
from paydemo.utils.retry import RetryConfig, RetryError, retry_with_backoff

__all__ = [
    "JsonFormatter",
    "RetryConfig",
    "RetryError",
    "configure_logging",
    "get_logger",
    "redact_secret",
    "retry_with_backoff",
]
