"""Durable, timestamped run artifacts."""

import json
from datetime import datetime
from pathlib import Path

import structlog
from pydantic import ValidationError

from searchprobe.errors import ArtifactFormatError, ArtifactNotFoundError
from searchprobe.models.query import QueryResult, Run, RunConfig, utcnow

logger = structlog.get_logger()

REPORT_PREFIX = "test_report_"
SUMMARY_PREFIX = "test_summary_"
STAMP_FORMAT = "%Y%m%d_%H%M%S"


def run_to_document(run: Run) -> dict:
    """Serialize a run: its config plus the ordered result records."""
    return {
        "config": {
            **run.config.model_dump(),
            "started_at": run.started_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
        },
        "results": [result.to_record() for result in run.results],
    }


def run_from_document(document: dict | list) -> Run:
    """
    Rebuild a run from its serialized form.

    A bare list of records (artifacts written without a config block) is
    accepted; its config then reads as unknown.
    """
    try:
        if isinstance(document, list):
            records = document
            config = RunConfig()
            started_at = None
        elif isinstance(document, dict) and isinstance(document.get("results"), list):
            records = document["results"]
            raw_config = dict(document.get("config") or {})
            started_at = raw_config.pop("started_at", None)
            config = RunConfig(**raw_config)
        else:
            raise ArtifactFormatError("Artifact is neither a record list nor a run document")

        results = [QueryResult.from_record(record) for record in records]
        if started_at:
            return Run(config=config, results=results, started_at=started_at)
        return Run(config=config, results=results)
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise ArtifactFormatError(f"Invalid run artifact: {e}") from e


def artifact_stamp(when: datetime | None = None) -> str:
    return (when or utcnow()).strftime(STAMP_FORMAT)


def save_run(run: Run, output_dir: Path, stamp: str | None = None) -> Path:
    """Write the run to ``output_dir/test_report_<stamp>.json``."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{REPORT_PREFIX}{stamp or artifact_stamp()}.json"

    with open(path, "w", encoding="utf-8") as f:
        json.dump(run_to_document(run), f, indent=2, ensure_ascii=False)

    logger.info("run_saved", path=str(path), results=len(run.results))
    return path


def save_summary(text: str, output_dir: Path, stamp: str | None = None) -> Path:
    """Write a human-readable summary next to the run artifact."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{SUMMARY_PREFIX}{stamp or artifact_stamp()}.txt"
    path.write_text(text, encoding="utf-8")
    logger.info("summary_saved", path=str(path))
    return path


def load_run(path: Path) -> Run:
    """Load a run artifact. Raises ArtifactNotFoundError or ArtifactFormatError."""
    if not path.is_file():
        raise ArtifactNotFoundError(f"Report file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise ArtifactFormatError(f"Invalid JSON format in report file: {path}") from e

    return run_from_document(document)


def find_latest_report(output_dir: Path) -> Path:
    """Return the most recent run artifact in ``output_dir``."""
    candidates = sorted(
        output_dir.glob(f"{REPORT_PREFIX}*.json") if output_dir.is_dir() else [],
        key=lambda p: (p.stat().st_mtime, p.name),
    )
    if not candidates:
        raise ArtifactNotFoundError(
            f"No test reports found in {output_dir}",
            details={"hint": "run 'searchprobe run' first"},
        )
    return candidates[-1]
