"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
        60.0,
        120.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

RETRY_FAILURE_COUNTER = Counter(
    "assessment_retry_attempt_failures_total",
    "Failed attempts of an external operation, before or at exhaustion",
    ("operation",),
)

RETRY_EXHAUSTED_COUNTER = Counter(
    "assessment_retry_exhausted_total",
    "External operations that failed on every allowed attempt",
    ("operation",),
)

FALLBACK_COUNTER = Counter(
    "assessment_fallback_total",
    "Assessments replaced by the fixed fallback after an unparseable model reply",
)

CLEANUP_FAILURE_COUNTER = Counter(
    "assessment_cleanup_failures_total",
    "Temporary audio files that could not be removed",
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def increment_retry_failure(operation: str) -> None:
    RETRY_FAILURE_COUNTER.labels(operation=operation or "unknown").inc()


def increment_retry_exhausted(operation: str) -> None:
    RETRY_EXHAUSTED_COUNTER.labels(operation=operation or "unknown").inc()


def increment_fallback() -> None:
    """Count one fallback assessment served."""

    FALLBACK_COUNTER.inc()


def increment_cleanup_failure() -> None:
    CLEANUP_FAILURE_COUNTER.inc()
