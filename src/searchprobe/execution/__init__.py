"""Execution package."""

from searchprobe.execution.executor import (
    ExecutionOutcome,
    Failed,
    QueryExecutor,
    Retrying,
    Succeeded,
    TryingStrategy,
)
from searchprobe.execution.strategies import (
    HTTP_STRATEGIES,
    SQL_STRATEGIES,
    QueryStrategy,
    escape_match,
)

__all__ = [
    "HTTP_STRATEGIES",
    "SQL_STRATEGIES",
    "ExecutionOutcome",
    "Failed",
    "QueryExecutor",
    "QueryStrategy",
    "Retrying",
    "Succeeded",
    "TryingStrategy",
    "escape_match",
]
