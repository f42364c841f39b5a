"""Evaluation package."""

from searchprobe.evaluation.runner import BatchRunner, default_queries, load_queries
from searchprobe.evaluation.scoring import DEFAULT_THRESHOLDS, QualityAssessment, score_quality

__all__ = [
    "DEFAULT_THRESHOLDS",
    "BatchRunner",
    "QualityAssessment",
    "default_queries",
    "load_queries",
    "score_quality",
]
