"""
Generate-report stage (terminal step of every tier).

Aggregates every upstream result the tier produced into the final report,
writes it to the primary record, bumps the owner's counters and removes the
job's transient keys.

Dependencies: thesis_review.core.report
System role: Final pipeline stage
"""

import logging
from datetime import datetime

from thesis_review.application.stages.base import StageDependencies, StageHandler
from thesis_review.core.exceptions import StoreError
from thesis_review.core.pipeline.stages import PipelineStage, get_stage, runs_stage
from thesis_review.core.report.aggregator import ReportAggregator
from thesis_review.models.job import Job, JobState, JobStatus, utc_now
from thesis_review.models.report import FinalAnalysisResult
from thesis_review.models.results import CrossValidateResult, DeepAnalyzeResult, PreAnalyzeResult

logger = logging.getLogger(__name__)


class GenerateReportStage(StageHandler):
    """Report aggregation and pipeline completion."""

    stage = PipelineStage.GENERATE_REPORT

    def __init__(self, deps: StageDependencies, aggregator: ReportAggregator) -> None:
        super().__init__(deps)
        self._aggregator = aggregator

    async def run(self, job: Job) -> FinalAnalysisResult:
        pre_analysis = await self.require(job, 2, PreAnalyzeResult)

        deep_analysis = None
        if runs_stage(job.tier, PipelineStage.DEEP_ANALYZE):
            deep_analysis = await self.require(
                job, get_stage(PipelineStage.DEEP_ANALYZE).result_step, DeepAnalyzeResult
            )

        cross_validation = None
        if runs_stage(job.tier, PipelineStage.CROSS_VALIDATE):
            cross_validation = await self.require(
                job, get_stage(PipelineStage.CROSS_VALIDATE).result_step, CrossValidateResult
            )

        return self._aggregator.build(job.tier, pre_analysis, deep_analysis, cross_validation)

    async def finalize(self, job: Job, result: FinalAnalysisResult) -> None:
        completed_at = utc_now()
        status = self._completed_status(job, completed_at)
        await self.deps.record_store.complete_analysis(job.job_id, result, status)
        await self.deps.status_store.set_status(job.job_id, status)

        try:
            await self.deps.record_store.record_owner_activity(job.owner_id)
        except StoreError as e:
            logger.warning(
                "finalize - Owner counters not updated",
                extra={"job_id": job.job_id, "owner_id": job.owner_id, "error": str(e)},
            )

        try:
            await self.deps.status_store.cleanup(job.job_id)
        except StoreError as e:
            # Keys still expire through their TTL.
            logger.warning(
                "finalize - Cleanup failed",
                extra={"job_id": job.job_id, "error": str(e)},
            )

        logger.info(
            "finalize - Analysis completed",
            extra={
                "job_id": job.job_id,
                "overall_score": result.overall_score,
                "grade": result.grade.letter,
            },
        )

    def _completed_status(self, job: Job, completed_at: datetime) -> JobStatus:
        return JobStatus(
            job_id=job.job_id,
            step=job.step,
            total_steps=job.total_steps,
            step_name=self.definition.name,
            status=JobState.COMPLETED,
            progress=100,
            completed_at=completed_at,
        )

    def summarize(self, result: FinalAnalysisResult) -> dict:
        return {"overall_score": result.overall_score, "grade": result.grade.letter}
