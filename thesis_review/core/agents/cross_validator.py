"""
Cross-validation and score calibration.

An independent validator model reviews the condensed agent results against
a prefix of the document, adjusts per-category scores and gives a holistic
overall score. An unusable validator response never fails the job: the
result falls back to the uncalibrated weighted average.

Dependencies: thesis_review.boundary.llm, thesis_review.core.report.grading
System role: Cross-validation stage business logic
"""

import logging

from thesis_review.boundary.llm.client import LanguageModelClient
from thesis_review.core.agents.prompts import (
    CROSS_VALIDATION_SYSTEM_PROMPT,
    cross_validation_prompt,
)
from thesis_review.core.exceptions import LLMProviderError
from thesis_review.core.pipeline.parse_result import Degraded, Ok, parse_model_output
from thesis_review.core.report.grading import weighted_average
from thesis_review.models.results import (
    AgentResult,
    CalibratedScores,
    CrossValidateResult,
    CrossValidation,
    ModelClass,
)

logger = logging.getLogger(__name__)

PARTIAL_SUMMARY = "Cross-validation partially completed."


def summarize_agent_results(agent_results: list[AgentResult]) -> dict:
    """Condensed per-category view handed to the validator."""
    return {
        agent.agent_id: {
            "name": agent.agent_name,
            "score": agent.score,
            "weight": agent.weight,
            "top_issues": [
                {"severity": issue.severity, "description": issue.description}
                for issue in agent.issues[:5]
            ],
            "top_strengths": agent.strengths[:3],
            "feedback": agent.feedback,
        }
        for agent in agent_results
    }


def calibrate(agent_results: list[AgentResult], validation: CrossValidation) -> CalibratedScores:
    """
    Merge validator adjustments into the agent scores.

    Per category the adjusted score wins when present. The overall score is
    the validator's holistic score when present, otherwise the weighted
    average of the calibrated category scores.
    """
    categories: dict[str, int] = {}
    weighted = []
    for agent in agent_results:
        verdict = validation.validation_results.get(agent.agent_id)
        score = agent.score
        if verdict is not None and verdict.adjusted_score is not None:
            score = verdict.adjusted_score
        categories[agent.agent_id] = score
        weighted.append((score, agent.weight))

    if validation.calibrated_overall_score is not None:
        overall = validation.calibrated_overall_score
    else:
        overall = weighted_average(weighted)
    return CalibratedScores(categories=categories, overall=overall)


class CrossValidator:
    """Runs the validator model and calibrates scores."""

    def __init__(
        self,
        llm: LanguageModelClient,
        text_chars: int = 100_000,
        fallback_confidence: int = 70,
    ) -> None:
        self._llm = llm
        self._text_chars = text_chars
        self._fallback_confidence = fallback_confidence

    async def validate(self, agent_results: list[AgentResult], text: str) -> CrossValidateResult:
        """
        Cross-validate agent results.

        Args:
            agent_results: Step 3 agent results
            text: Full document text

        Returns:
            CrossValidateResult: Calibrated, or the weighted-average fallback
                with ``degraded=True``
        """
        prompt = cross_validation_prompt(
            summarize_agent_results(agent_results),
            text[: self._text_chars],
        )

        try:
            raw = await self._llm.generate(
                ModelClass.VALIDATOR,
                prompt,
                system_prompt=CROSS_VALIDATION_SYSTEM_PROMPT,
            )
        except LLMProviderError as e:
            parsed = Degraded(self._fallback(agent_results), e.message)
        else:
            parsed = parse_model_output(raw, CrossValidation, lambda: self._fallback(agent_results))

        if isinstance(parsed, Ok):
            return CrossValidateResult(
                cross_validation=parsed.value,
                calibrated_scores=calibrate(agent_results, parsed.value),
            )

        logger.warning(
            "validate - Falling back to uncalibrated scores",
            extra={"error": parsed.error},
        )
        validation = parsed.value
        return CrossValidateResult(
            cross_validation=validation,
            calibrated_scores=CalibratedScores(
                categories={agent.agent_id: agent.score for agent in agent_results},
                overall=validation.calibrated_overall_score,
            ),
            degraded=True,
        )

    def _fallback(self, agent_results: list[AgentResult]) -> CrossValidation:
        return CrossValidation(
            calibrated_overall_score=weighted_average(
                (agent.score, agent.weight) for agent in agent_results
            ),
            confidence=self._fallback_confidence,
            summary=PARTIAL_SUMMARY,
        )
