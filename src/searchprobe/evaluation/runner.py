"""Batch runner driving test queries through executor, normalizer and scorer."""

import json
import time
from pathlib import Path
from typing import Callable, Iterable

import structlog
from pydantic import ValidationError

from searchprobe.backends.base import BackendAdapter
from searchprobe.config import DEFAULT_INTER_QUERY_DELAY_SECONDS, QualityThresholds
from searchprobe.errors import ConfigurationError, MalformedResponseError, TransportError
from searchprobe.evaluation.scoring import DEFAULT_THRESHOLDS, score_quality
from searchprobe.execution.executor import Failed, QueryExecutor
from searchprobe.models.query import Query, QueryResult, Run, RunConfig
from searchprobe.normalization import normalize
from searchprobe.observability import QUERY_LATENCY, QUERY_OUTCOMES

logger = structlog.get_logger()

DATASET_PATH = Path(__file__).parent.parent / "data" / "queries.json"


def load_queries(path: Path) -> list[Query]:
    """
    Load test queries from a JSON file.

    Entries are either plain strings or objects with ``query`` and an
    optional ``expected_results`` count. Raises ConfigurationError when the
    file cannot be read or an entry is not a valid query.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            dataset = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read query file: {e}", details={"path": str(path)}) from e

    if not isinstance(dataset, list):
        raise ConfigurationError("Query file must contain a JSON list", details={"path": str(path)})

    queries = []
    for position, item in enumerate(dataset, 1):
        try:
            if isinstance(item, str):
                queries.append(Query(text=item))
            else:
                queries.append(
                    Query(
                        text=item["query"],
                        expected_result_count=item.get("expected_results", 1),
                    )
                )
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise ConfigurationError(
                f"Invalid query entry #{position}",
                details={"path": str(path), "cause": str(e)},
            ) from e
    return queries


def default_queries() -> list[Query]:
    """Return the bundled test query set."""
    return load_queries(DATASET_PATH)


class BatchRunner:
    """
    Sequential aggregator producing one Run per batch.

    A failing query is recorded and the batch moves on; only a failed
    preflight aborts before any query executes.
    """

    def __init__(
        self,
        adapter: BackendAdapter,
        executor: QueryExecutor,
        thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
        inter_query_delay: float = DEFAULT_INTER_QUERY_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.adapter = adapter
        self.executor = executor
        self.thresholds = thresholds
        self.inter_query_delay = inter_query_delay
        self._sleep = sleep
        self._clock = clock

    @property
    def run_config(self) -> RunConfig:
        return RunConfig(
            limit=self.executor.limit,
            timeout_ms=self.executor.timeout_ms,
            backend_id=self.adapter.backend_id,
        )

    def preflight(self, timeout_ms: int = 5000):
        """Verify the backend is reachable. Raises ConfigurationError."""
        try:
            self.adapter.ping(timeout_ms)
        except TransportError as e:
            raise ConfigurationError(
                "Backend is not reachable",
                details={"backend": self.adapter.backend_id, "cause": e.message},
            ) from e
        logger.info("backend_reachable", backend=self.adapter.backend_id)

    def _failure(self, query: Query, elapsed_ms: float, reason: str) -> QueryResult:
        return QueryResult(
            query=query,
            response_time_ms=elapsed_ms,
            search_time_ms=elapsed_ms,
            quality="poor",
            relevance_score=self.thresholds.poor_score,
            success=False,
            error=reason,
        )

    def run_query(self, query: Query) -> QueryResult:
        """Execute, normalize and score one query."""
        start_time = self._clock()
        outcome = self.executor.execute(query.text)
        elapsed_ms = round((self._clock() - start_time) * 1000, 1)
        QUERY_LATENCY.labels(backend=self.adapter.backend_id).observe(elapsed_ms / 1000.0)

        if isinstance(outcome, Failed):
            return self._failure(query, elapsed_ms, outcome.reason)

        try:
            response = normalize(outcome.payload)
        except MalformedResponseError as e:
            return self._failure(query, elapsed_ms, str(e))

        assessment = score_quality(
            response.total_results,
            query.expected_result_count,
            response.top_score,
            self.thresholds,
        )
        search_time_ms = response.elapsed_ms if response.elapsed_reported else elapsed_ms

        return QueryResult(
            query=query,
            response_time_ms=elapsed_ms,
            search_time_ms=search_time_ms,
            total_results=response.total_results,
            top_score=response.top_score,
            response=response,
            quality=assessment.category,
            relevance_score=assessment.score,
            success=True,
        )

    def run(self, queries: Iterable[Query]) -> Run:
        """Run every query in order and return the completed Run."""
        queries = list(queries)
        run = Run(config=self.run_config)

        logger.info(
            "starting_batch",
            queries=len(queries),
            backend=run.config.backend_id,
            limit=run.config.limit,
        )

        for index, query in enumerate(queries, 1):
            if index > 1 and self.inter_query_delay > 0:
                self._sleep(self.inter_query_delay)

            result = self.run_query(query)
            run.append(result)
            QUERY_OUTCOMES.labels(quality=result.quality, success=str(result.success).lower()).inc()

            if result.success:
                logger.info(
                    "query_completed",
                    index=f"{index}/{len(queries)}",
                    query=query.text,
                    total_results=result.total_results,
                    quality=result.quality,
                    latency=f"{result.response_time_ms:.1f}ms",
                )
            else:
                logger.error(
                    "query_failed",
                    index=f"{index}/{len(queries)}",
                    query=query.text,
                    error=result.error,
                )

        successful = sum(1 for r in run.results if r.success)
        logger.info("batch_complete", total=len(run.results), successful=successful)
        return run
