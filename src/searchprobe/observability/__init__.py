"""Observability package."""

from searchprobe.observability.metrics import (
    BACKEND_CALLS,
    EXECUTION_RETRIES,
    QUERY_LATENCY,
    QUERY_OUTCOMES,
    write_metrics,
)

__all__ = [
    "BACKEND_CALLS",
    "EXECUTION_RETRIES",
    "QUERY_LATENCY",
    "QUERY_OUTCOMES",
    "write_metrics",
]
