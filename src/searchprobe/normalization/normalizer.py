"""Conversion of engine-specific payloads into the canonical SearchResponse."""

from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlparse

import structlog

from searchprobe.errors import MalformedResponseError
from searchprobe.models.query import NO_CONTENT, NO_ID, NO_URL, UNTITLED, Hit, SearchResponse
from searchprobe.models.tabular import TabularRows
from searchprobe.normalization.shapes import (
    BareHitList,
    FlatHitsEnvelope,
    NestedHitsEnvelope,
    PayloadShape,
    TabularPayload,
    UnrecognizedPayload,
    decode_payload,
)

logger = structlog.get_logger()

# Sphinx WEIGHT() values are integers; scale them into the JSON score range
TABULAR_WEIGHT_SCALE = 1000.0

# Positional mapping of tabular columns preceding the relevance column
TABULAR_FIELDS = ("id", "url", "timestamp", "title", "content")


def _as_score(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if score != score or score < 0:  # NaN or negative
        return 0.0
    return score


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _hit_from_json(raw_hit: dict) -> Hit:
    source = raw_hit.get("_source")
    if not isinstance(source, dict):
        source = {}

    def pick(name: str) -> str:
        return _text(source.get(name)) or _text(raw_hit.get(name))

    hit_id = raw_hit.get("_id", raw_hit.get("id"))
    score = raw_hit.get("_score", raw_hit.get("score"))

    return Hit(
        id=_text(hit_id) or NO_ID,
        score=_as_score(score),
        title=pick("title") or UNTITLED,
        url=pick("url") or NO_URL,
        content=pick("content") or NO_CONTENT,
    )


def title_from_url(url: str) -> str:
    """Derive a readable title from a URL's last path segment."""
    if not url or url == NO_URL:
        return ""
    name = PurePosixPath(urlparse(url).path).name
    return name.split(".", 1)[0].replace("_", " ").strip()


def _hit_from_row(row: tuple) -> Hit:
    *fields, weight = row
    values = {name: _text(value) for name, value in zip(TABULAR_FIELDS, fields)}
    url = values.get("url") or NO_URL
    title = values.get("title") or title_from_url(url) or UNTITLED

    return Hit(
        id=values.get("id") or NO_ID,
        score=_as_score(weight) / TABULAR_WEIGHT_SCALE,
        title=title,
        url=url,
        content=values.get("content") or NO_CONTENT,
    )


def _build(
    hits: list[Hit],
    total: int,
    took: float | None,
    relation: str = "eq",
) -> SearchResponse:
    return SearchResponse(
        total_results=max(total, len(hits)),
        elapsed_ms=took if took is not None else 0.0,
        elapsed_reported=took is not None,
        hits=hits,
        max_score=max((hit.score for hit in hits), default=0.0),
        total_relation=relation,
    )


def normalize_shape(shape: PayloadShape) -> SearchResponse:
    """Map an already decoded payload shape to the canonical response."""
    if isinstance(shape, NestedHitsEnvelope):
        hits = [_hit_from_json(h) for h in shape.hits]
        return _build(hits, shape.total, shape.took, shape.relation)

    if isinstance(shape, FlatHitsEnvelope):
        hits = [_hit_from_json(h) for h in shape.hits]
        return _build(hits, shape.total, shape.took)

    if isinstance(shape, BareHitList):
        hits = [_hit_from_json(h) for h in shape.hits]
        return _build(hits, len(hits), None)

    if isinstance(shape, TabularPayload):
        table: TabularRows = shape.table
        complete = [tuple(row) for row in table.rows if len(row) >= 2]
        if len(complete) < len(table.rows):
            logger.warning(
                "tabular_rows_dropped",
                dropped=len(table.rows) - len(complete),
                reason="fewer than two cells",
            )
        hits = [_hit_from_row(row) for row in complete]
        return _build(hits, len(hits), None)

    if isinstance(shape, UnrecognizedPayload):
        raise MalformedResponseError(f"Unrecognized response shape: {shape.reason}")

    raise MalformedResponseError(f"Unsupported payload shape {type(shape).__name__}")


def normalize(raw: Any) -> SearchResponse:
    """
    Normalize a raw backend payload.

    Raises MalformedResponseError when the payload matches no known shape.
    """
    return normalize_shape(decode_payload(raw))
