"""Telemetry helpers and metrics."""

from .metrics import (
    CLEANUP_FAILURE_COUNTER,
    ERROR_COUNTER,
    FALLBACK_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    RETRY_EXHAUSTED_COUNTER,
    RETRY_FAILURE_COUNTER,
    increment_cleanup_failure,
    increment_fallback,
    increment_retry_exhausted,
    increment_retry_failure,
    observe_request,
)

__all__ = [
    "CLEANUP_FAILURE_COUNTER",
    "ERROR_COUNTER",
    "FALLBACK_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "RETRY_EXHAUSTED_COUNTER",
    "RETRY_FAILURE_COUNTER",
    "increment_cleanup_failure",
    "increment_fallback",
    "increment_retry_exhausted",
    "increment_retry_failure",
    "observe_request",
]
