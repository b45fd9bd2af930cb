"""
Score arithmetic and grade bands.

Dependencies: thesis_review.models.report
System role: Deterministic scoring rules shared by cross-validation and reporting
"""

import math
from dataclasses import dataclass
from typing import Iterable

from thesis_review.models.report import Grade

NEUTRAL_SCORE = 50


@dataclass(frozen=True)
class GradeBand:
    """Inclusive score range mapped to a letter grade."""

    letter: str
    min_score: int
    max_score: int
    label: str
    color: str

    def contains(self, score: int) -> bool:
        return self.min_score <= score <= self.max_score

    def to_grade(self) -> Grade:
        return Grade(letter=self.letter, label=self.label, color=self.color)


# Descending, non-overlapping; first match wins.
GRADE_BANDS: tuple[GradeBand, ...] = (
    GradeBand("A+", 95, 100, "Excellent", "#10B981"),
    GradeBand("A", 90, 94, "Very Good", "#34D399"),
    GradeBand("A-", 85, 89, "Good", "#6EE7B7"),
    GradeBand("B+", 80, 84, "Above Average", "#FCD34D"),
    GradeBand("B", 75, 79, "Average", "#FBBF24"),
    GradeBand("B-", 70, 74, "Acceptable", "#F59E0B"),
    GradeBand("C+", 65, 69, "Weak", "#F97316"),
    GradeBand("C", 60, 64, "Insufficient", "#EF4444"),
    GradeBand("F", 0, 59, "Failing", "#DC2626"),
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores (``round`` is banker's)."""
    return math.floor(value + 0.5)


def grade_for_score(score: int) -> Grade:
    """
    Letter grade for a score.

    Args:
        score: Overall score, nominally 0-100

    Returns:
        Grade: First matching band, or the lowest band when none matches
    """
    for band in GRADE_BANDS:
        if band.contains(score):
            return band.to_grade()
    return GRADE_BANDS[-1].to_grade()


def weighted_average(scores: Iterable[tuple[float, float]]) -> int:
    """
    ``round(sum(score * weight) / sum(weight))``.

    Weights are used as given, without renormalization.

    Args:
        scores: (score, weight) pairs

    Returns:
        int: Weighted average, or the neutral score when the weights sum to 0
    """
    weighted_sum = 0.0
    total = 0.0
    for score, weight in scores:
        weighted_sum += score * weight
        total += weight
    if total <= 0:
        return NEUTRAL_SCORE
    return round_half_up(weighted_sum / total)
