"""Reporting package."""

from searchprobe.reporting.analysis import analyze_run, compare_reports, compare_runs
from searchprobe.reporting.formatters import OUTPUT_FORMATS, format_comparison, format_report

__all__ = [
    "OUTPUT_FORMATS",
    "analyze_run",
    "compare_reports",
    "compare_runs",
    "format_comparison",
    "format_report",
]
