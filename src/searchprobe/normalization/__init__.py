"""Normalization package."""

from searchprobe.normalization.normalizer import normalize, normalize_shape, title_from_url
from searchprobe.normalization.shapes import (
    BareHitList,
    FlatHitsEnvelope,
    NestedHitsEnvelope,
    PayloadShape,
    TabularPayload,
    UnrecognizedPayload,
    decode_payload,
)

__all__ = [
    "BareHitList",
    "FlatHitsEnvelope",
    "NestedHitsEnvelope",
    "PayloadShape",
    "TabularPayload",
    "UnrecognizedPayload",
    "decode_payload",
    "normalize",
    "normalize_shape",
    "title_from_url",
]
