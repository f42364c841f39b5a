"""Text, JSON and CSV renderings of reports and comparisons."""

import csv
import io
from typing import Literal

from searchprobe.models.report import Comparison, Report

OutputFormat = Literal["text", "json", "csv"]
OUTPUT_FORMATS = ("text", "json", "csv")

RULE = "=" * 42


def _report_metrics(report: Report) -> list[tuple[str, float | int]]:
    return [
        ("total_queries", report.total_queries),
        ("successful_queries", report.successful_queries),
        ("failed_queries", report.failed_queries),
        ("success_rate", report.success_rate),
        ("avg_response_time", report.response_time.average),
        ("min_response_time", report.response_time.minimum),
        ("max_response_time", report.response_time.maximum),
        ("avg_results_per_query", report.results.average_per_query),
        ("total_results_found", report.results.total_found),
        ("avg_relevance_score", report.relevance.average),
        ("min_relevance_score", report.relevance.minimum),
        ("max_relevance_score", report.relevance.maximum),
        ("excellent_quality", report.quality_distribution.get("excellent", 0)),
        ("good_quality", report.quality_distribution.get("good", 0)),
        ("fair_quality", report.quality_distribution.get("fair", 0)),
        ("poor_quality", report.quality_distribution.get("poor", 0)),
    ]


def _report_text(report: Report) -> str:
    lines = [
        RULE,
        "SEARCH QUALITY ANALYSIS",
        RULE,
        f"Report: {report.source or 'in-memory run'}",
        f"Backend: {report.backend_id}",
        f"Analysis Time: {report.generated_at.strftime('%Y-%m-%dT%H:%M:%SZ')}",
        "",
        "SUMMARY STATISTICS:",
        f"  Total Queries: {report.total_queries}",
        f"  Successful: {report.successful_queries}",
        f"  Failed: {report.failed_queries}",
        f"  Success Rate: {report.success_rate:.2f}%",
        "",
        "PERFORMANCE METRICS:",
        "  Response Time:",
        f"    Average: {report.response_time.average:.0f}ms",
        f"    Minimum: {report.response_time.minimum:.0f}ms",
        f"    Maximum: {report.response_time.maximum:.0f}ms",
        "  Results:",
        f"    Average per Query: {report.results.average_per_query:.1f}",
        f"    Total Found: {report.results.total_found}",
        "  Relevance:",
        f"    Average Score: {report.relevance.average:.0f}/100",
        f"    Score Range: {report.relevance.minimum:.0f}-{report.relevance.maximum:.0f}",
        "",
        "QUALITY DISTRIBUTION:",
    ]
    for category, count in report.quality_distribution.items():
        lines.append(f"  {category.title()}: {count}")

    lines += ["", f"TOP {len(report.top_queries)} PERFORMING QUERIES:"]
    if report.top_queries:
        for q in report.top_queries:
            lines.append(
                f"  - {q.query} (Score: {q.relevance_score}, Time: {q.response_time_ms:.0f}ms)"
            )
    else:
        lines.append("  (none)")

    if report.failures:
        lines += ["", "FAILED QUERIES:"]
        for f in report.failures:
            lines.append(f"  - {f.query}: {f.error}")

    lines.append(RULE)
    return "\n".join(lines) + "\n"


def _comparison_text(comparison: Comparison) -> str:
    b, c, d = comparison.baseline, comparison.candidate, comparison.deltas
    rows = [
        ("Success rate (%)", b.success_rate, c.success_rate, d.success_rate),
        ("Avg response (ms)", b.response_time.average, c.response_time.average, d.avg_response_time),
        ("Avg relevance", b.relevance.average, c.relevance.average, d.avg_relevance),
        ("Total queries", b.total_queries, c.total_queries, d.total_queries),
    ]
    lines = [
        RULE,
        "RUN COMPARISON",
        RULE,
        f"Baseline:  {b.source or 'in-memory run'}",
        f"Candidate: {c.source or 'in-memory run'}",
        "",
        f"{'Metric':<20} {'Baseline':>10} {'Candidate':>10} {'Delta':>10}",
        "-" * 53,
    ]
    for name, base, cand, delta in rows:
        lines.append(f"{name:<20} {base:>10.2f} {cand:>10.2f} {delta:>+10.2f}")
    lines.append(RULE)
    return "\n".join(lines) + "\n"


def _csv(header: list[str], rows: list[tuple]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def format_report(report: Report, fmt: OutputFormat = "text") -> str:
    if fmt == "json":
        return report.model_dump_json(indent=2) + "\n"
    if fmt == "csv":
        return _csv(["metric", "value"], _report_metrics(report))
    return _report_text(report)


def format_comparison(comparison: Comparison, fmt: OutputFormat = "text") -> str:
    if fmt == "json":
        return comparison.model_dump_json(indent=2) + "\n"
    if fmt == "csv":
        baseline = dict(_report_metrics(comparison.baseline))
        candidate = dict(_report_metrics(comparison.candidate))
        rows = [
            (name, baseline[name], candidate[name], candidate[name] - baseline[name])
            for name in baseline
        ]
        return _csv(["metric", "baseline", "candidate", "delta"], rows)
    return _comparison_text(comparison)
