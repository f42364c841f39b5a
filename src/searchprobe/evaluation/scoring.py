"""Deterministic result-quality heuristic."""

from typing import NamedTuple

from searchprobe.config import QualityThresholds
from searchprobe.models.query import QualityCategory

DEFAULT_THRESHOLDS = QualityThresholds()


class QualityAssessment(NamedTuple):
    category: QualityCategory
    score: int


def score_quality(
    total_results: int,
    expected_results: int,
    top_score: float,
    thresholds: QualityThresholds = DEFAULT_THRESHOLDS,
) -> QualityAssessment:
    """
    Rate a result set from its size and best score.

    Rules are evaluated in order and the first match wins:

    1. no results                                  -> poor
    2. enough results and top score above 0.5      -> excellent
    3. enough results or top score above 0.3       -> good
    4. some results                                -> fair
    5. otherwise                                   -> poor

    Cutoffs and category scores come from ``thresholds``.
    """
    if total_results == 0:
        return QualityAssessment("poor", thresholds.poor_score)

    enough = total_results >= expected_results

    if enough and top_score > thresholds.excellent_min_top_score:
        return QualityAssessment("excellent", thresholds.excellent_score)
    if enough or top_score > thresholds.good_min_top_score:
        return QualityAssessment("good", thresholds.good_score)
    if total_results > 0:
        return QualityAssessment("fair", thresholds.fair_score)
    return QualityAssessment("poor", thresholds.poor_score)
