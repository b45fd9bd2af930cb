"""
Deep-analyze stage (step 3).

Runs the tier's scoring agents concurrently, reports progress after each
agent, stores the per-agent results for the next stage and writes one audit
row per agent to the primary record store.

Dependencies: thesis_review.core.agents
System role: Third pipeline stage (standard and comprehensive tiers)
"""

import logging

from thesis_review.application.stages.base import StageDependencies, StageHandler
from thesis_review.boundary.llm.client import LanguageModelClient
from thesis_review.core.agents.evaluator import MultiAgentEvaluator
from thesis_review.core.agents.prompts import AnalysisContext
from thesis_review.core.agents.registry import agents_for_tier
from thesis_review.core.exceptions import StoreError
from thesis_review.core.pipeline.stages import PipelineStage
from thesis_review.core.report.grading import round_half_up
from thesis_review.models.job import Job, JobState, utc_now
from thesis_review.models.results import (
    AgentResult,
    DeepAnalyzeResult,
    ExtractResult,
    PreAnalyzeResult,
)

logger = logging.getLogger(__name__)


def agent_progress(completed: int, total: int) -> int:
    """Stage progress after ``completed`` of ``total`` agents (10-90)."""
    if total <= 0:
        return 90
    return round_half_up(completed / total * 80) + 10


class DeepAnalyzeStage(StageHandler):
    """Multi-agent scoring."""

    stage = PipelineStage.DEEP_ANALYZE
    result_model = DeepAnalyzeResult

    def __init__(
        self,
        deps: StageDependencies,
        evaluator: MultiAgentEvaluator,
        llm: LanguageModelClient,
    ) -> None:
        super().__init__(deps)
        self._evaluator = evaluator
        self._llm = llm

    async def run(self, job: Job) -> DeepAnalyzeResult:
        extract = await self.require(job, 1, ExtractResult)
        pre_analysis = await self.require(job, 2, PreAnalyzeResult)

        running = await self.deps.status_store.get_status(job.job_id)
        started_at = running.started_at if running is not None else utc_now()

        context = AnalysisContext(
            sections=extract.sections,
            page_count=extract.estimated_page_count,
            word_count=extract.word_count,
            language=pre_analysis.structure.language,
            field_of_study=pre_analysis.structure.field_of_study,
            academic_level=pre_analysis.structure.academic_level,
            reference_total=pre_analysis.references.total_count,
            reference_recent=pre_analysis.references.recent_count,
        )

        async def on_agent_complete(completed: int, total: int, result: AgentResult) -> None:
            await self.update_status(
                job,
                JobState.RUNNING,
                progress=agent_progress(completed, total),
                step_name=f"{result.agent_name} completed",
                started_at=started_at,
            )

        agent_results = await self._evaluator.evaluate(
            agents_for_tier(job.tier),
            context,
            extract.text,
            on_agent_complete=on_agent_complete,
        )
        await self._audit(job, agent_results)
        return DeepAnalyzeResult(agent_results=agent_results)

    async def _audit(self, job: Job, agent_results: list[AgentResult]) -> None:
        model_ids = {result.agent_id: self._llm.model_id(result.model) for result in agent_results}
        try:
            await self.deps.record_store.save_agent_results(job.job_id, agent_results, model_ids)
        except StoreError as e:
            logger.warning(
                "_audit - Could not write agent audit rows",
                extra={"job_id": job.job_id, "error": str(e)},
            )

    def summarize(self, result: DeepAnalyzeResult) -> dict:
        return {
            "agent_count": len(result.agent_results),
            "scores": {agent.agent_id: agent.score for agent in result.agent_results},
            "degraded_agents": [agent.agent_id for agent in result.agent_results if agent.degraded],
        }
