"""Storage package for run artifacts."""

from searchprobe.storage.artifacts import (
    artifact_stamp,
    find_latest_report,
    load_run,
    run_from_document,
    run_to_document,
    save_run,
    save_summary,
)

__all__ = [
    "artifact_stamp",
    "find_latest_report",
    "load_run",
    "run_from_document",
    "run_to_document",
    "save_run",
    "save_summary",
]
