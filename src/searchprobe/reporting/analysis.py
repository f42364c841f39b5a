"""Summary statistics over runs and deltas between two runs."""

from searchprobe.models.query import QUALITY_CATEGORIES, QueryResult, Run
from searchprobe.models.report import (
    Comparison,
    FailedQuery,
    MetricDeltas,
    RangeStats,
    RankedQuery,
    Report,
    ResultsStats,
)

DEFAULT_TOP_N = 5


def _range(values: list[float]) -> RangeStats:
    if not values:
        return RangeStats()
    return RangeStats(
        average=sum(values) / len(values),
        minimum=min(values),
        maximum=max(values),
    )


def _top_queries(successful: list[QueryResult], top_n: int) -> list[RankedQuery]:
    # sorted() is stable, so ties keep their input order
    ranked = sorted(successful, key=lambda r: r.relevance_score, reverse=True)
    return [
        RankedQuery(
            query=r.query.text,
            relevance_score=r.relevance_score,
            response_time_ms=r.response_time_ms,
            result_quality=r.quality,
        )
        for r in ranked[:top_n]
    ]


def analyze_run(run: Run, top_n: int = DEFAULT_TOP_N, source: str = "") -> Report:
    """
    Compute a Report for one run.

    Timing, result and relevance statistics cover successful queries only;
    the quality distribution covers every query. Empty and all-failed runs
    yield zeros.
    """
    results = run.results
    successful = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    total = len(results)
    success_rate = round(len(successful) * 100 / total, 2) if total else 0.0

    totals_found = [r.total_results for r in successful]
    results_stats = ResultsStats(
        average_per_query=sum(totals_found) / len(totals_found) if totals_found else 0.0,
        total_found=sum(totals_found),
    )

    distribution = {category: 0 for category in QUALITY_CATEGORIES}
    for r in results:
        distribution[r.quality] += 1

    return Report(
        source=source,
        backend_id=run.config.backend_id,
        total_queries=total,
        successful_queries=len(successful),
        failed_queries=len(failed),
        success_rate=success_rate,
        response_time=_range([r.response_time_ms for r in successful]),
        results=results_stats,
        relevance=_range([float(r.relevance_score) for r in successful]),
        quality_distribution=distribution,
        top_queries=_top_queries(successful, top_n),
        failures=[FailedQuery(query=r.query.text, error=r.error) for r in failed],
    )


def compare_reports(baseline: Report, candidate: Report) -> Comparison:
    """Signed deltas of candidate relative to baseline."""
    deltas = MetricDeltas(
        success_rate=round(candidate.success_rate - baseline.success_rate, 2),
        avg_response_time=candidate.response_time.average - baseline.response_time.average,
        avg_relevance=candidate.relevance.average - baseline.relevance.average,
        total_queries=candidate.total_queries - baseline.total_queries,
    )
    return Comparison(baseline=baseline, candidate=candidate, deltas=deltas)


def compare_runs(
    baseline: Run,
    candidate: Run,
    baseline_source: str = "",
    candidate_source: str = "",
) -> Comparison:
    return compare_reports(
        analyze_run(baseline, source=baseline_source),
        analyze_run(candidate, source=candidate_source),
    )
