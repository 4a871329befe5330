"""Bounded retry with linear backoff for fallible async operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from app.telemetry import increment_retry_exhausted, increment_retry_failure

logger = logging.getLogger("app.services.assessment_pipeline")

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryExhaustedError(RuntimeError):
    """Raised once every attempt of an operation has failed."""

    def __init__(self, operation_name: str, attempts: int, last_error: BaseException) -> None:
        self.operation_name = operation_name
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to complete {operation_name.lower()} after {attempts} attempts: {last_error}"
        )


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    operation_name: str = "Operation",
    *,
    base_delay: float = 1.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or ``max_attempts`` is reached.

    The wait after the n-th failure is ``n * base_delay`` seconds. Every
    exception is treated as retryable; cancellation is not intercepted.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as exc:
            increment_retry_failure(operation_name)
            logger.warning(
                "%s attempt %s/%s failed: %s",
                operation_name,
                attempt,
                max_attempts,
                exc,
            )
            if attempt >= max_attempts:
                increment_retry_exhausted(operation_name)
                raise RetryExhaustedError(operation_name, max_attempts, exc) from exc

        await sleep(attempt * base_delay)


__all__ = ["RetryExhaustedError", "retry_operation"]
