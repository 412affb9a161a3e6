"""Observability helpers for Knowledge Search."""

from __future__ import annotations

import logging
import time

import structlog
from prometheus_client import Counter, Histogram

_logger_configured = False


def configure_logging(level: int | str = logging.INFO) -> None:
    global _logger_configured  # noqa: PLW0603 - module-level guard
    if _logger_configured:
        return
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format="%(message)s")
    # httpx logs every request at INFO; the client emits its own events.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _logger_configured = True


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_correlation_id() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = "knowledge_search") -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


class SearchMetrics:
    """Prometheus metrics for webhook round trips."""

    OUTCOMES = ("success", "timeout", "transport", "http_status", "decode")

    request_latency = Histogram(
        "knowledge_search_request_duration_seconds",
        "Time spent waiting on the search webhook.",
        buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0),
    )
    requests_total = Counter(
        "knowledge_search_requests_total",
        "Webhook requests by outcome.",
        ["outcome"],
    )

    @classmethod
    def observe_request(cls, duration_seconds: float) -> None:
        cls.request_latency.observe(duration_seconds)

    @classmethod
    def record_outcome(cls, outcome: str) -> None:
        if outcome not in cls.OUTCOMES:
            raise ValueError(f"Unknown outcome: {outcome}")
        cls.requests_total.labels(outcome=outcome).inc()


class TimedSection:
    """Context manager capturing elapsed time for metrics."""

    def __init__(self, callback) -> None:
        self._callback = callback
        self._start = 0.0
        self.elapsed = 0.0

    def __enter__(self) -> "TimedSection":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        self.elapsed = time.perf_counter() - self._start
        self._callback(self.elapsed)


__all__ = [
    "SearchMetrics",
    "TimedSection",
    "bind_correlation_id",
    "clear_correlation_id",
    "configure_logging",
    "get_logger",
]
