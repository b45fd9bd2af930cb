"""Report aggregation and grading."""

from thesis_review.core.report.aggregator import ReportAggregator
from thesis_review.core.report.grading import (
    GRADE_BANDS,
    grade_for_score,
    round_half_up,
    weighted_average,
)

__all__ = [
    "ReportAggregator",
    "GRADE_BANDS",
    "grade_for_score",
    "round_half_up",
    "weighted_average",
]
