"""Retry with exponential backoff for transient vendor API failures."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from paydemo.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger("utils.retry")

T = TypeVar("T")


class RetryError(Exception):
    """Raised when all retry attempts have been exhausted."""

    def __init__(self, message: str, attempts: int, last_exception: BaseException) -> None:
        """Initialize the RetryError.

        Args:
            message: Error message.
            attempts: Number of attempts made.
            last_exception: The exception raised by the final attempt.
        """
        super().__init__(message)
        self.attempts = attempts
        self.__cause__ = last_exception


@dataclass(frozen=True)
class RetryConfig:
    """Backoff policy for calls to the payment provider."""

    max_retries: int = 2
    """Retries after the initial attempt."""

    base_delay: float = 0.5
    """Delay in seconds before the first retry."""

    max_delay: float = 8.0
    """Upper bound for any single delay."""

    exponential_base: float = 2.0

    jitter: bool = True
    """Spread delays by up to 25% in either direction."""

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the delay for a given retry attempt.

        Args:
            attempt: The retry attempt number (0-indexed).

        Returns:
            Delay in seconds, never negative.
        """
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)

        if self.jitter:
            spread = delay * 0.25
            delay = max(0.0, delay + random.uniform(-spread, spread))

        return delay


def retry_with_backoff(
    func: Callable[[], T],
    config: RetryConfig | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    operation: str = "call",
) -> T:
    """Execute a function, retrying transient failures with exponential backoff.

    Args:
        func: Zero-argument callable to execute.
        config: Retry policy. Uses defaults if not provided.
        retry_on: Exception types considered transient.
        operation: Name used in log lines.

    Returns:
        The return value of ``func``.

    Raises:
        RetryError: If every attempt raised a transient exception.
        Exception: Any exception outside ``retry_on`` propagates immediately.
    """
    config = config or RetryConfig()
    last_exception: BaseException | None = None

    for attempt in range(config.max_retries + 1):
        try:
            return func()
        except retry_on as e:
            last_exception = e
            if attempt < config.max_retries:
                delay = config.calculate_delay(attempt)
                logger.warning(
                    "Transient failure, retrying",
                    extra={
                        "operation": operation,
                        "attempt": attempt + 1,
                        "delay_seconds": round(delay, 3),
                        "error_type": type(e).__name__,
                    },
                )
                time.sleep(delay)

    assert last_exception is not None
    attempts = config.max_retries + 1
    raise RetryError(
        f"{operation} failed after {attempts} attempts",
        attempts=attempts,
        last_exception=last_exception,
    )
