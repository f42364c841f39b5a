"""Known raw payload shapes and the ordered decoder that recognizes them."""

from dataclasses import dataclass, field
from typing import Any, Union

from searchprobe.models.tabular import TabularRows

# Keys under which engines place their hit lists
HIT_LIST_KEYS = ("hits", "results")

# Column separator of delimited text rows from tabular protocols
TABULAR_DELIMITER = "\t"


@dataclass(frozen=True)
class NestedHitsEnvelope:
    """Envelope with a nested hit list and an explicit total."""

    hits: list[dict]
    total: int
    relation: str = "eq"
    took: float | None = None


@dataclass(frozen=True)
class FlatHitsEnvelope:
    """Envelope whose hit list sits directly under a top-level key."""

    hits: list[dict]
    total: int
    took: float | None = None


@dataclass(frozen=True)
class BareHitList:
    hits: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class TabularPayload:
    table: TabularRows


@dataclass(frozen=True)
class UnrecognizedPayload:
    reason: str


PayloadShape = Union[
    NestedHitsEnvelope,
    FlatHitsEnvelope,
    BareHitList,
    TabularPayload,
    UnrecognizedPayload,
]


def _as_count(value: Any) -> int | None:
    """Read a non-negative result count, or None when the value is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float) and value.is_integer():
        return max(int(value), 0)
    if isinstance(value, dict):
        return _as_count(value.get("value"))
    return None


def _as_took(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _all_dicts(items: list) -> bool:
    return all(isinstance(item, dict) for item in items)


def _decode_envelope(raw: dict) -> PayloadShape:
    took = _as_took(raw.get("took"))

    for key in HIT_LIST_KEYS:
        value = raw.get(key)

        if isinstance(value, dict):
            inner = next(
                (value[k] for k in HIT_LIST_KEYS if isinstance(value.get(k), list)),
                None,
            )
            if inner is None:
                continue
            if not _all_dicts(inner):
                return UnrecognizedPayload(f"non-object entries in '{key}' hit list")
            total = _as_count(value.get("total"))
            if total is None:
                total = _as_count(raw.get("total"))
            if total is None:
                total = len(inner)
            relation = value.get("total_relation")
            if isinstance(value.get("total"), dict):
                relation = value["total"].get("relation", relation)
            return NestedHitsEnvelope(
                hits=inner,
                total=total,
                relation="gte" if relation == "gte" else "eq",
                took=took,
            )

        if isinstance(value, list):
            if not _all_dicts(value):
                return UnrecognizedPayload(f"non-object entries in '{key}' hit list")
            total = _as_count(raw.get("total"))
            return FlatHitsEnvelope(
                hits=value,
                total=len(value) if total is None else total,
                took=took,
            )

    if "error" in raw:
        return UnrecognizedPayload(f"backend error: {raw['error']}")

    total = _as_count(raw.get("total"))
    if total is not None:
        return FlatHitsEnvelope(hits=[], total=total, took=took)

    keys = ", ".join(sorted(str(k) for k in raw)) or "none"
    return UnrecognizedPayload(f"no hit list or total in payload (keys: {keys})")


def decode_payload(raw: Any) -> PayloadShape:
    """
    Decode a raw backend payload into one of the known shapes.

    Shapes are tried in priority order: nested envelope, flat envelope,
    bare list, tabular rows (as TabularRows or tab-delimited text with a
    header line). Anything else becomes UnrecognizedPayload.
    """
    if isinstance(raw, TabularRows):
        if len(raw.columns) < 2:
            return UnrecognizedPayload("tabular payload needs a relevance column and at least one field")
        return TabularPayload(table=raw)

    if isinstance(raw, dict):
        return _decode_envelope(raw)

    if isinstance(raw, list):
        if not _all_dicts(raw):
            return UnrecognizedPayload("top-level list contains non-object entries")
        return BareHitList(hits=raw)

    if raw is None or raw == "":
        return UnrecognizedPayload("empty payload")

    if isinstance(raw, str):
        header = next((line for line in raw.splitlines() if line.strip()), "")
        if len(header.split(TABULAR_DELIMITER)) >= 2:
            return decode_payload(TabularRows.from_text(raw, TABULAR_DELIMITER))
        return UnrecognizedPayload(f"non-JSON payload: {raw[:80]!r}")

    return UnrecognizedPayload(f"unsupported payload type {type(raw).__name__}")
