"""Logging and metrics helpers."""

from .observability import (
    SearchMetrics,
    TimedSection,
    bind_correlation_id,
    clear_correlation_id,
    configure_logging,
    get_logger,
)

__all__ = [
    "SearchMetrics",
    "TimedSection",
    "bind_correlation_id",
    "clear_correlation_id",
    "configure_logging",
    "get_logger",
]
