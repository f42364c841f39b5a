"""Models package."""

from searchprobe.models.query import (
    QUALITY_CATEGORIES,
    Hit,
    QualityCategory,
    Query,
    QueryResult,
    Run,
    RunConfig,
    SearchResponse,
)
from searchprobe.models.report import (
    Comparison,
    FailedQuery,
    MetricDeltas,
    RangeStats,
    RankedQuery,
    Report,
    ResultsStats,
)
from searchprobe.models.tabular import TabularRows

__all__ = [
    "QUALITY_CATEGORIES",
    "Comparison",
    "FailedQuery",
    "Hit",
    "MetricDeltas",
    "QualityCategory",
    "Query",
    "QueryResult",
    "RangeStats",
    "RankedQuery",
    "Report",
    "ResultsStats",
    "Run",
    "RunConfig",
    "SearchResponse",
    "TabularRows",
]
