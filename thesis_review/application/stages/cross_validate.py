"""
Cross-validate stage (step 4, comprehensive tier only).

Dependencies: thesis_review.core.agents.cross_validator
System role: Fourth pipeline stage
"""

from thesis_review.application.stages.base import StageDependencies, StageHandler
from thesis_review.core.agents.cross_validator import CrossValidator
from thesis_review.core.pipeline.stages import PipelineStage
from thesis_review.models.job import Job
from thesis_review.models.results import CrossValidateResult, DeepAnalyzeResult, ExtractResult


class CrossValidateStage(StageHandler):
    """Independent review and calibration of the agent scores."""

    stage = PipelineStage.CROSS_VALIDATE
    result_model = CrossValidateResult

    def __init__(self, deps: StageDependencies, validator: CrossValidator) -> None:
        super().__init__(deps)
        self._validator = validator

    async def run(self, job: Job) -> CrossValidateResult:
        extract = await self.require(job, 1, ExtractResult)
        deep_analysis = await self.require(job, 3, DeepAnalyzeResult)
        return await self._validator.validate(deep_analysis.agent_results, extract.text)

    def summarize(self, result: CrossValidateResult) -> dict:
        return {
            "calibrated_overall_score": result.calibrated_scores.overall,
            "confidence": result.cross_validation.confidence,
            "degraded": result.degraded,
        }
