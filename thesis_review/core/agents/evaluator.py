"""
Multi-agent evaluator.

Runs every agent of a tier concurrently against the same document and waits
for all of them. Each agent is guarded on its own: a timeout, provider error
or malformed response turns into a neutral AgentResult carrying an error
annotation instead of failing the batch.

Dependencies: asyncio (stdlib), thesis_review.boundary.llm, thesis_review.core.pipeline
System role: Deep-analysis stage business logic
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from thesis_review.boundary.llm.client import LanguageModelClient
from thesis_review.core.agents.prompts import AnalysisContext
from thesis_review.core.agents.registry import AgentConfig
from thesis_review.core.exceptions import LLMProviderError
from thesis_review.core.pipeline.parse_result import Degraded, parse_model_output
from thesis_review.models.results import AgentAssessment, AgentResult

logger = logging.getLogger(__name__)

# (completed, total, result) after each agent resolves
AgentProgressCallback = Callable[[int, int, AgentResult], Awaitable[None]]


class MultiAgentEvaluator:
    """
    Concurrent, failure-tolerant agent runner.

    Usage:
        evaluator = MultiAgentEvaluator(llm, timeout_seconds=240)
        results = await evaluator.evaluate(agents, context, text)
    """

    def __init__(
        self,
        llm: LanguageModelClient,
        timeout_seconds: float = 240.0,
        neutral_score: int = 50,
        text_windows: dict[str, int] | None = None,
    ) -> None:
        self._llm = llm
        self._timeout = timeout_seconds
        self._neutral_score = neutral_score
        # Per-agent overrides of the registry's text windows
        self._text_windows = dict(text_windows or {})

    async def evaluate(
        self,
        agents: tuple[AgentConfig, ...],
        context: AnalysisContext,
        text: str,
        on_agent_complete: AgentProgressCallback | None = None,
    ) -> list[AgentResult]:
        """
        Run all agents and collect one result per agent.

        Args:
            agents: Agent configs, in registry order
            context: Shared document facts
            text: Full document text
            on_agent_complete: Awaited as each agent resolves

        Returns:
            list[AgentResult]: Same order as ``agents``; never raises for agent failures
        """
        total = len(agents)
        completed = 0
        lock = asyncio.Lock()

        async def run(config: AgentConfig) -> AgentResult:
            nonlocal completed
            result = await self._run_agent(config, context, text)
            if on_agent_complete is not None:
                # One progress write at a time, in completion order.
                async with lock:
                    completed += 1
                    await self._notify(on_agent_complete, completed, total, result)
            return result

        results = await asyncio.gather(*(run(config) for config in agents))

        degraded = [result.agent_id for result in results if result.degraded]
        logger.info(
            "evaluate - All agents resolved",
            extra={"agent_count": total, "degraded_agents": degraded},
        )
        return list(results)

    async def _run_agent(
        self,
        config: AgentConfig,
        context: AnalysisContext,
        text: str,
    ) -> AgentResult:
        started = time.perf_counter()
        limit = self._text_windows.get(config.agent_id, config.text_window)
        window = text[:limit] if limit else text
        prompt = config.build_prompt(context, window)

        try:
            raw = await asyncio.wait_for(
                self._llm.generate(config.model, prompt, system_prompt=config.system_prompt),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            return self._neutral(config, f"Timed out after {self._timeout}s", started)
        except LLMProviderError as e:
            return self._neutral(config, e.message, started)
        except Exception as e:
            logger.exception(
                f"_run_agent - Unexpected agent failure: {type(e).__name__}",
                extra={"agent_id": config.agent_id},
            )
            return self._neutral(config, f"{type(e).__name__}: {e}", started)

        parsed = parse_model_output(
            raw,
            AgentAssessment,
            lambda: AgentAssessment(score=self._neutral_score),
        )
        assessment = parsed.value
        error = parsed.error if isinstance(parsed, Degraded) else None
        if error:
            logger.warning(
                "_run_agent - Unparseable agent response",
                extra={"agent_id": config.agent_id, "error": error},
            )

        return AgentResult(
            agent_id=config.agent_id,
            agent_name=config.name,
            model=config.model,
            weight=config.weight,
            score=assessment.score,
            sub_scores=assessment.sub_scores,
            issues=assessment.issues,
            strengths=assessment.strengths,
            feedback=assessment.feedback,
            raw_response={"text": raw},
            processing_time_ms=_elapsed_ms(started),
            error=error,
        )

    def _neutral(self, config: AgentConfig, error: str, started: float) -> AgentResult:
        logger.warning(
            "_neutral - Agent degraded to neutral score",
            extra={"agent_id": config.agent_id, "error": error},
        )
        return AgentResult(
            agent_id=config.agent_id,
            agent_name=config.name,
            model=config.model,
            weight=config.weight,
            score=self._neutral_score,
            feedback="Analysis could not be completed for this category.",
            processing_time_ms=_elapsed_ms(started),
            error=error,
        )

    @staticmethod
    async def _notify(
        callback: AgentProgressCallback,
        completed: int,
        total: int,
        result: AgentResult,
    ) -> None:
        # Progress reporting must never fail the agent batch.
        try:
            await callback(completed, total, result)
        except Exception as e:
            logger.warning(
                f"_notify - Progress callback failed: {type(e).__name__}: {e}",
                extra={"agent_id": result.agent_id},
            )


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)
