"""Command-line interface for SearchProbe."""

import argparse
import json
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from searchprobe.backends import BackendAdapter, create_adapter
from searchprobe.config import Settings, get_settings
from searchprobe.errors import ArtifactError, ConfigurationError, MalformedResponseError, TransportError
from searchprobe.evaluation import BatchRunner, default_queries, load_queries
from searchprobe.execution import Failed, QueryExecutor
from searchprobe.models import Query
from searchprobe.normalization import normalize
from searchprobe.observability import write_metrics
from searchprobe.reporting import OUTPUT_FORMATS, analyze_run, compare_runs, format_comparison, format_report
from searchprobe.storage import artifact_stamp, find_latest_report, load_run, run_to_document, save_run, save_summary

logger = structlog.get_logger()


def configure_logging(verbose: bool = False):
    """Configure structured logging to stderr, keeping stdout for results."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(10 if verbose else 20),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def _bounded_int(low: int, high: int):
    def parse(value: str) -> int:
        try:
            number = int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"'{value}' is not a number")
        if not low <= number <= high:
            raise argparse.ArgumentTypeError(f"must be a number between {low} and {high}")
        return number

    return parse


def _open_backend(settings: Settings) -> BackendAdapter:
    return create_adapter(settings.backend_config())


def _executor(settings: Settings, adapter: BackendAdapter, limit: int | None, timeout: int | None) -> QueryExecutor:
    return QueryExecutor(
        adapter,
        limit=limit or settings.default_limit,
        timeout_ms=(timeout or settings.timeout_seconds) * 1000,
        max_retries=settings.max_retries,
        retry_delay=settings.retry_delay_seconds,
    )


def cmd_run(args) -> int:
    """Run the test query batch and save the run artifact."""
    settings = get_settings()

    try:
        if args.query:
            queries = [Query(text=args.query)]
        elif args.queries:
            queries = load_queries(Path(args.queries))
        else:
            queries = default_queries()
    except ValidationError as e:
        logger.error("invalid_query", error=str(e).splitlines()[0])
        return 1
    except ConfigurationError as e:
        logger.error("invalid_queries", error=str(e))
        return 1

    try:
        adapter = _open_backend(settings)
    except ConfigurationError as e:
        logger.error("configuration_error", error=str(e))
        return 1

    with adapter:
        runner = BatchRunner(
            adapter,
            _executor(settings, adapter, args.limit, args.timeout),
            thresholds=settings.thresholds(),
            inter_query_delay=settings.inter_query_delay_seconds,
        )
        try:
            runner.preflight()
        except ConfigurationError as e:
            logger.error("preflight_failed", error=str(e))
            return 1

        run = runner.run(queries)

    stamp = artifact_stamp(run.started_at)
    report_path = save_run(run, settings.output_dir, stamp)
    report = analyze_run(run, top_n=settings.top_n, source=str(report_path))
    summary = format_report(report, "text")
    save_summary(summary, settings.output_dir, stamp)

    if args.metrics_file:
        write_metrics(Path(args.metrics_file))

    if args.json_only:
        print(json.dumps(run_to_document(run), indent=2, ensure_ascii=False))
    else:
        print(summary)
    return 0


def cmd_search(args) -> int:
    """Run a single query and print its normalized results."""
    settings = get_settings()

    try:
        adapter = _open_backend(settings)
    except ConfigurationError as e:
        logger.error("configuration_error", error=str(e))
        return 1

    with adapter:
        outcome = _executor(settings, adapter, args.limit, args.timeout).execute(args.query)

    if isinstance(outcome, Failed):
        logger.error("search_failed", query=args.query, error=outcome.reason)
        return 1

    try:
        response = normalize(outcome.payload)
    except MalformedResponseError as e:
        logger.error("search_failed", query=args.query, error=str(e))
        return 1

    if args.json:
        print(json.dumps(response.to_envelope(), indent=2, ensure_ascii=False))
        return 0

    print(f"\n Query: {args.query}")
    print(f" Strategy: {outcome.strategy} | Results: {response.total_results} | Took: {response.elapsed_ms:.0f}ms\n")
    if not response.hits:
        print(" No results found.")
    for i, hit in enumerate(response.hits, 1):
        print(f"{i}. {hit.title}")
        print(f"    {hit.url}")
        print(f"    Score: {hit.score:.4f} (ID: {hit.id})")
        print(f"   {hit.content[:200]}...")
        print()
    return 0


def cmd_analyze(args) -> int:
    """Analyze a run artifact or compare two of them."""
    settings = get_settings()

    try:
        if args.latest:
            report_path = find_latest_report(settings.output_dir)
            logger.info("using_latest_report", path=str(report_path))
        elif args.report:
            report_path = Path(args.report)
        else:
            logger.error("no_report_specified", hint="pass a report file or --latest")
            return 1

        run = load_run(report_path)
        if args.compare:
            compare_path = Path(args.compare)
            comparison = compare_runs(run, load_run(compare_path), str(report_path), str(compare_path))
            output = format_comparison(comparison, args.format)
        else:
            output = format_report(analyze_run(run, top_n=settings.top_n, source=str(report_path)), args.format)
    except ArtifactError as e:
        logger.error("analysis_failed", error=str(e))
        return 1

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        logger.info("analysis_saved", path=args.output)
    else:
        print(output, end="")
    return 0


def cmd_health(args) -> int:
    """Check that the configured backend is reachable."""
    settings = get_settings()
    try:
        with _open_backend(settings) as adapter:
            adapter.ping(args.timeout * 1000)
    except (ConfigurationError, TransportError) as e:
        logger.error("backend_unhealthy", error=str(e))
        return 1

    logger.info("backend_healthy", backend=adapter.backend_id)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="searchprobe",
        description="Search-quality regression harness for full-text/vector backends",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # run command
    run_parser = subparsers.add_parser("run", help="Run the test query batch")
    run_parser.add_argument("--query", "-q", help="Run a single query instead of the batch")
    run_parser.add_argument("--queries", help="JSON file with test queries")
    run_parser.add_argument("--limit", "-l", type=_bounded_int(1, 100), help="Results per query")
    run_parser.add_argument("--timeout", "-t", type=_bounded_int(5, 300), help="Query timeout in seconds")
    run_parser.add_argument("--verbose", "-v", action="store_true", default=argparse.SUPPRESS, help="Enable debug logging")
    run_parser.add_argument("--json-only", "-j", action="store_true", help="Print the run artifact only")
    run_parser.add_argument("--metrics-file", help="Write Prometheus metrics to this file")
    run_parser.set_defaults(func=cmd_run)

    # search command
    search_parser = subparsers.add_parser("search", help="Run one query and show results")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--limit", "-l", type=_bounded_int(1, 1000), help="Number of results")
    search_parser.add_argument("--timeout", "-t", type=_bounded_int(1, 300), help="Query timeout in seconds")
    search_parser.add_argument("--json", "-j", action="store_true", help="Print the canonical envelope")
    search_parser.set_defaults(func=cmd_search)

    # analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze or compare run artifacts")
    analyze_parser.add_argument("report", nargs="?", help="Run artifact to analyze")
    analyze_parser.add_argument("--latest", "-L", action="store_true", help="Use the most recent artifact")
    analyze_parser.add_argument("--compare", "-c", help="Second artifact to compare against")
    analyze_parser.add_argument("--format", "-f", choices=OUTPUT_FORMATS, default="text")
    analyze_parser.add_argument("--output", "-o", help="Write the analysis to this file")
    analyze_parser.set_defaults(func=cmd_analyze)

    # health command
    health_parser = subparsers.add_parser("health", help="Check backend reachability")
    health_parser.add_argument("--timeout", "-t", type=_bounded_int(1, 60), default=5)
    health_parser.set_defaults(func=cmd_health)

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.error("interrupted", command=args.command)
        return 130


if __name__ == "__main__":
    sys.exit(main())
