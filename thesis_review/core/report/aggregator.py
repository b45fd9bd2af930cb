"""
Final report aggregation.

Merges the outputs of every stage that ran for a job into one
FinalAnalysisResult: category scores (calibrated when available), the
overall score and grade, severity-bucketed issues, strengths,
recommendations and immediate actions.

Dependencies: thesis_review.models, thesis_review.core.agents.registry
System role: Report stage business logic
"""

import logging

from thesis_review.configs.pipeline import PipelineSettings
from thesis_review.core.agents.registry import category_key
from thesis_review.core.report.grading import grade_for_score, weighted_average
from thesis_review.models.job import Tier
from thesis_review.models.report import (
    CategoryScore,
    FinalAnalysisResult,
    IssueBuckets,
    ReportMetadata,
)
from thesis_review.models.results import (
    CrossValidateResult,
    DeepAnalyzeResult,
    Issue,
    PreAnalyzeResult,
)

logger = logging.getLogger(__name__)

CATEGORY_NAMES = {
    "structure": "Structure and organization",
    "methodology": "Methodology",
    "writing_quality": "Writing quality",
    "references": "References",
    "originality": "Originality",
}

BASIC_STRUCTURE_FEEDBACK = "Basic structure analysis completed."
GENERIC_RECOMMENDATION = (
    "Your thesis is in good overall shape. Minor improvements can make it even stronger."
)


def bucket_issues(issues: list[Issue]) -> IssueBuckets:
    """Bucket issues strictly by severity, preserving input order."""
    critical = [issue for issue in issues if issue.severity == "critical"]
    major = [issue for issue in issues if issue.severity == "major"]
    minor = [issue for issue in issues if issue.severity == "minor"]
    return IssueBuckets(
        critical=critical,
        major=major,
        minor=minor,
        total=len(critical) + len(major) + len(minor),
    )


def dedupe_strengths(strengths: list[str], limit: int) -> list[str]:
    """First-seen order, duplicates dropped, capped at ``limit``."""
    return list(dict.fromkeys(strengths))[:limit]


def build_recommendations(
    category_scores: dict[str, CategoryScore],
    critical_count: int,
    threshold: int = 70,
    limit: int = 5,
) -> list[str]:
    """
    Heuristic recommendations; the result is never empty.

    The three lowest categories scoring under ``threshold`` each yield one
    recommendation, critical issues yield one summary line, and a generic
    line is used when nothing qualifies.
    """
    recommendations = []

    lowest = sorted(category_scores.items(), key=lambda item: item[1].score)[:3]
    for category, category_score in lowest:
        if category_score.score < threshold:
            name = CATEGORY_NAMES.get(category, category)
            recommendations.append(
                f"{name} needs improvement (current: {category_score.score}/100)."
            )

    if critical_count > 0:
        recommendations.append(
            f"{critical_count} critical issue(s) found. These should be fixed before submission."
        )

    if not recommendations:
        recommendations.append(GENERIC_RECOMMENDATION)

    return recommendations[:limit]


def immediate_actions(issues: list[Issue], limit: int = 5) -> list[str]:
    """Suggestion (or description) of the first ``limit`` critical issues."""
    actions = []
    for issue in issues:
        if issue.severity != "critical":
            continue
        actions.append(issue.suggestion or issue.description)
        if len(actions) >= limit:
            break
    return actions


class ReportAggregator:
    """Builds the final report from stage outputs."""

    def __init__(self, settings: PipelineSettings) -> None:
        self._settings = settings

    def build(
        self,
        tier: Tier,
        pre_analysis: PreAnalyzeResult,
        deep_analysis: DeepAnalyzeResult | None = None,
        cross_validation: CrossValidateResult | None = None,
    ) -> FinalAnalysisResult:
        """
        Aggregate stage outputs into the final report.

        Args:
            tier: Job tier
            pre_analysis: Step 2 result (always required)
            deep_analysis: Step 3 result (standard and comprehensive)
            cross_validation: Step 4 result (comprehensive)

        Returns:
            FinalAnalysisResult: Immutable report
        """
        settings = self._settings
        issues: list[Issue] = []
        strengths: list[str] = []

        if deep_analysis is None:
            category_scores, overall = self._structure_only(pre_analysis, issues)
        else:
            category_scores, overall = self._from_agents(
                deep_analysis, cross_validation, issues, strengths
            )

        buckets = bucket_issues(issues)
        structure = pre_analysis.structure
        references = pre_analysis.references

        result = FinalAnalysisResult(
            overall_score=overall,
            grade=grade_for_score(overall),
            category_scores=category_scores,
            issues=buckets,
            strengths=dedupe_strengths(strengths, settings.max_strengths),
            recommendations=build_recommendations(
                category_scores,
                critical_count=len(buckets.critical),
                threshold=settings.recommendation_threshold,
                limit=settings.max_recommendations,
            ),
            immediate_actions=immediate_actions(issues, settings.max_immediate_actions),
            metadata=ReportMetadata(
                word_count=pre_analysis.metadata.word_count,
                page_count=pre_analysis.metadata.estimated_pages,
                language=structure.language,
                academic_level=structure.academic_level,
                field_of_study=structure.field_of_study,
                reference_count=references.total_count,
                recent_reference_count=references.recent_count,
            ),
            analysis_tier=tier,
            cross_validated=cross_validation is not None,
            cross_validation_summary=(
                cross_validation.cross_validation.summary if cross_validation else None
            ),
        )

        logger.info(
            "build - Report aggregated",
            extra={
                "tier": tier.value,
                "overall_score": overall,
                "grade": result.grade.letter,
                "issue_total": buckets.total,
            },
        )
        return result

    def _structure_only(
        self,
        pre_analysis: PreAnalyzeResult,
        issues: list[Issue],
    ) -> tuple[dict[str, CategoryScore], int]:
        """Basic tier: the structure score is the whole report."""
        structure = pre_analysis.structure
        for description in structure.structure_issues:
            issues.append(Issue(severity="minor", category="structure", description=description))

        categories = {
            "structure": CategoryScore(
                score=structure.structure_score,
                feedback=BASIC_STRUCTURE_FEEDBACK,
            )
        }
        return categories, structure.structure_score

    def _from_agents(
        self,
        deep_analysis: DeepAnalyzeResult,
        cross_validation: CrossValidateResult | None,
        issues: list[Issue],
        strengths: list[str],
    ) -> tuple[dict[str, CategoryScore], int]:
        calibrated = cross_validation.calibrated_scores if cross_validation else None
        categories: dict[str, CategoryScore] = {}
        weighted: list[tuple[float, float]] = []

        for agent in deep_analysis.agent_results:
            key = category_key(agent.agent_id)
            score = agent.score
            if calibrated is not None and calibrated.categories.get(agent.agent_id) is not None:
                score = calibrated.categories[agent.agent_id]

            categories[key] = CategoryScore(
                score=score,
                feedback=agent.feedback,
                sub_scores=agent.sub_scores,
            )
            weighted.append((agent.score, agent.weight))

            issues.extend(issue.model_copy(update={"category": key}) for issue in agent.issues)
            strengths.extend(agent.strengths)

        if cross_validation is not None:
            issues.extend(cross_validation.cross_validation.missed_issues)

        if calibrated is not None:
            overall = calibrated.overall
        else:
            overall = weighted_average(weighted)
        return categories, overall
