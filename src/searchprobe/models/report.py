"""Report and comparison models derived from runs."""

from datetime import datetime

from pydantic import BaseModel, Field

from searchprobe.models.query import QUALITY_CATEGORIES, utcnow


class RangeStats(BaseModel):
    """Average, minimum and maximum of one metric."""

    average: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0


class ResultsStats(BaseModel):
    average_per_query: float = 0.0
    total_found: int = 0


class RankedQuery(BaseModel):
    """A query entry in the top-N list."""

    query: str
    relevance_score: int
    response_time_ms: float
    result_quality: str


class FailedQuery(BaseModel):
    query: str
    error: str


def _empty_distribution() -> dict[str, int]:
    return {category: 0 for category in QUALITY_CATEGORIES}


class Report(BaseModel):
    """Summary statistics over one run."""

    source: str = ""
    generated_at: datetime = Field(default_factory=utcnow)
    backend_id: str = "unknown"
    total_queries: int = 0
    successful_queries: int = 0
    failed_queries: int = 0
    success_rate: float = 0.0  # percent
    response_time: RangeStats = Field(default_factory=RangeStats)
    results: ResultsStats = Field(default_factory=ResultsStats)
    relevance: RangeStats = Field(default_factory=RangeStats)
    quality_distribution: dict[str, int] = Field(default_factory=_empty_distribution)
    top_queries: list[RankedQuery] = Field(default_factory=list)
    failures: list[FailedQuery] = Field(default_factory=list)


class MetricDeltas(BaseModel):
    """Signed differences, candidate minus baseline."""

    success_rate: float = 0.0
    avg_response_time: float = 0.0
    avg_relevance: float = 0.0
    total_queries: int = 0


class Comparison(BaseModel):
    """Two reports and the deltas between them."""

    generated_at: datetime = Field(default_factory=utcnow)
    baseline: Report
    candidate: Report
    deltas: MetricDeltas
