"""Query, hit, response and run models."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

QualityCategory = Literal["excellent", "good", "fair", "poor"]
QUALITY_CATEGORIES: tuple[QualityCategory, ...] = ("excellent", "good", "fair", "poor")

# Placeholders for hit fields the backend left empty
UNTITLED = "Untitled"
NO_URL = "#"
NO_CONTENT = "No content available"
NO_ID = "N/A"

MAX_QUERY_LENGTH = 1000


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class Query(BaseModel):
    """A natural-language test query with its expected result count."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1, max_length=MAX_QUERY_LENGTH)
    expected_result_count: int = Field(default=1, ge=0)

    @field_validator("text", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class Hit(BaseModel):
    """A single normalized search result."""

    model_config = ConfigDict(frozen=True)

    id: str = NO_ID
    score: float = Field(default=0.0, ge=0.0)
    title: str = UNTITLED
    url: str = NO_URL
    content: str = NO_CONTENT


class SearchResponse(BaseModel):
    """Canonical search response, identical for every backend family."""

    model_config = ConfigDict(frozen=True)

    total_results: int = Field(default=0, ge=0)
    elapsed_ms: float = 0.0
    elapsed_reported: bool = False
    hits: list[Hit] = Field(default_factory=list)
    max_score: float = 0.0
    total_relation: Literal["eq", "gte"] = "eq"

    @property
    def truncated(self) -> bool:
        """True when the backend capped the page below the match count."""
        return self.total_results > len(self.hits)

    @property
    def top_score(self) -> float:
        return self.max_score

    def to_envelope(self) -> dict:
        """Export the canonical result envelope consumed downstream."""
        return {
            "total": self.total_results,
            "took": self.elapsed_ms,
            "max_score": self.max_score,
            "hits": [
                {
                    "_id": hit.id,
                    "_score": hit.score,
                    "_source": {
                        "title": hit.title,
                        "url": hit.url,
                        "content": hit.content,
                    },
                }
                for hit in self.hits
            ],
        }

    @classmethod
    def from_envelope(cls, envelope: dict) -> "SearchResponse":
        """Rebuild a response from a canonical envelope written by ``to_envelope``."""
        hits = [
            Hit(id=raw["_id"], score=raw["_score"], **raw.get("_source", {}))
            for raw in envelope.get("hits", [])
        ]
        return cls(
            total_results=envelope.get("total", len(hits)),
            elapsed_ms=envelope.get("took", 0.0),
            elapsed_reported=envelope.get("elapsed_reported", False),
            hits=hits,
            max_score=envelope.get("max_score", 0.0),
            total_relation=envelope.get("total_relation", "eq"),
        )


class QueryResult(BaseModel):
    """Outcome of one query's executor, normalizer and scorer pipeline."""

    model_config = ConfigDict(frozen=True)

    query: Query
    response_time_ms: float = 0.0
    search_time_ms: float = 0.0
    total_results: int = 0
    top_score: float = 0.0
    response: SearchResponse | None = None
    quality: QualityCategory = "poor"
    relevance_score: int = Field(default=0, ge=0, le=100)
    success: bool = False
    error: str = ""
    timestamp: datetime = Field(default_factory=utcnow)

    def to_record(self) -> dict:
        """Serialize to the run artifact record shape."""
        record = {
            "query": self.query.text,
            "metrics": {
                "response_time_ms": self.response_time_ms,
                "search_time_ms": self.search_time_ms,
                "total_results": self.total_results,
                "expected_results": self.query.expected_result_count,
                "top_score": self.top_score,
                "relevance_score": self.relevance_score,
                "result_quality": self.quality,
            },
            "success": self.success,
            "error": self.error,
            "timestamp": self.timestamp.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        }
        if self.response is not None:
            record["response"] = {
                **self.response.to_envelope(),
                "elapsed_reported": self.response.elapsed_reported,
                "total_relation": self.response.total_relation,
            }
        return record

    @classmethod
    def from_record(cls, record: dict) -> "QueryResult":
        """Rebuild a result from an artifact record."""
        metrics = record.get("metrics") or {}
        envelope = record.get("response")
        return cls(
            query=Query(
                text=record["query"],
                expected_result_count=metrics.get("expected_results", 1),
            ),
            response_time_ms=metrics.get("response_time_ms", 0),
            search_time_ms=metrics.get("search_time_ms", 0),
            total_results=metrics.get("total_results", 0),
            top_score=metrics.get("top_score", 0),
            quality=metrics.get("result_quality", "poor"),
            relevance_score=metrics.get("relevance_score", 0),
            success=record.get("success", False),
            error=record.get("error") or "",
            response=SearchResponse.from_envelope(envelope) if envelope else None,
            timestamp=record.get("timestamp") or utcnow(),
        )


class RunConfig(BaseModel):
    """Execution parameters recorded alongside a run."""

    model_config = ConfigDict(frozen=True)

    limit: int = 10
    timeout_ms: int = 30_000
    backend_id: str = "unknown"


class Run(BaseModel):
    """Ordered, append-only collection of query results from one batch."""

    config: RunConfig = Field(default_factory=RunConfig)
    started_at: datetime = Field(default_factory=utcnow)
    results: list[QueryResult] = Field(default_factory=list)

    def append(self, result: QueryResult):
        self.results.append(result)
