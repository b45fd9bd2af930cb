"""
Test suite for MultiAgentEvaluator.

Uses the scripted language model from conftest; no network access.

System role: Verification of concurrent, failure-tolerant agent scoring
"""

import asyncio

import pytest

from thesis_review.core.agents.evaluator import MultiAgentEvaluator
from thesis_review.core.agents.prompts import AnalysisContext
from thesis_review.core.agents.registry import AGENT_REGISTRY, agents_for_tier
from thesis_review.core.exceptions import LLMProviderError
from thesis_review.models.job import Tier
from thesis_review.models.results import ModelClass


@pytest.fixture
def context() -> AnalysisContext:
    return AnalysisContext(
        sections=[],
        page_count=42,
        word_count=18_000,
        language="tr",
        field_of_study="Education",
        academic_level="master",
        reference_total=64,
        reference_recent=20,
    )


class TestEvaluate:
    """Test suite for MultiAgentEvaluator.evaluate."""

    @pytest.mark.asyncio
    async def test_should_return_one_result_per_agent_in_registry_order(self, llm, context) -> None:
        """Test results keep registry order regardless of completion order."""
        # Arrange
        evaluator = MultiAgentEvaluator(llm, timeout_seconds=5)

        # Act
        results = await evaluator.evaluate(AGENT_REGISTRY, context, "thesis text")

        # Assert
        assert [result.agent_id for result in results] == [
            "structure",
            "methodology",
            "writing",
            "references",
            "originality",
        ]
        assert [result.score for result in results] == [80, 70, 85, 60, 80]
        assert all(not result.degraded for result in results)

    @pytest.mark.asyncio
    async def test_all_agents_failing_should_yield_neutral_scores(self, llm, context) -> None:
        """Test provider failures never escape; every agent degrades to 50."""
        # Arrange
        for config in AGENT_REGISTRY:
            llm.responses[config.agent_id] = LLMProviderError("quota exceeded", model_id="m")
        evaluator = MultiAgentEvaluator(llm, timeout_seconds=5, neutral_score=50)

        # Act
        results = await evaluator.evaluate(AGENT_REGISTRY, context, "thesis text")

        # Assert
        assert len(results) == 5
        assert all(result.score == 50 for result in results)
        assert all(result.degraded for result in results)
        assert results[0].error == "quota exceeded"

    @pytest.mark.asyncio
    async def test_unparseable_response_should_degrade_single_agent(self, llm, context) -> None:
        """Test one agent's bad JSON does not affect the others."""
        # Arrange
        llm.responses["methodology"] = "Sorry, I cannot help with that."
        evaluator = MultiAgentEvaluator(llm, timeout_seconds=5)

        # Act
        results = await evaluator.evaluate(AGENT_REGISTRY, context, "thesis text")

        # Assert
        methodology = results[1]
        assert methodology.degraded
        assert methodology.score == 50
        assert methodology.raw_response == {"text": "Sorry, I cannot help with that."}
        assert not results[0].degraded

    @pytest.mark.asyncio
    async def test_slow_agent_should_time_out_to_neutral(self, llm, context) -> None:
        """Test the per-call timeout converts a hung call into a neutral result."""
        # Arrange
        original = llm.generate

        async def slow_generate(model, prompt, system_prompt=None):
            if model == ModelClass.STRONG:
                await asyncio.sleep(1)
            return await original(model, prompt, system_prompt=system_prompt)

        llm.generate = slow_generate
        evaluator = MultiAgentEvaluator(llm, timeout_seconds=0.05)

        # Act
        results = await evaluator.evaluate(AGENT_REGISTRY, context, "thesis text")

        # Assert
        by_id = {result.agent_id: result for result in results}
        assert by_id["methodology"].degraded
        assert "Timed out" in by_id["methodology"].error
        assert not by_id["structure"].degraded

    @pytest.mark.asyncio
    async def test_progress_callback_should_count_up_to_total(self, llm, context) -> None:
        """Test the callback fires once per agent with a monotonic counter."""
        # Arrange
        seen = []

        async def on_complete(completed, total, result):
            seen.append((completed, total))

        evaluator = MultiAgentEvaluator(llm, timeout_seconds=5)

        # Act
        await evaluator.evaluate(AGENT_REGISTRY, context, "text", on_agent_complete=on_complete)

        # Assert
        assert sorted(seen) == [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]

    @pytest.mark.asyncio
    async def test_progress_callbacks_should_not_overlap(self, llm, context) -> None:
        """Test a slow progress write is finished before the next one starts."""
        # Arrange
        seen = []

        async def on_complete(completed, total, result):
            await asyncio.sleep(0.05 if completed == 1 else 0)
            seen.append(completed)

        evaluator = MultiAgentEvaluator(llm, timeout_seconds=5)

        # Act
        await evaluator.evaluate(AGENT_REGISTRY, context, "text", on_agent_complete=on_complete)

        # Assert
        assert seen == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_failing_progress_callback_should_not_fail_batch(self, llm, context) -> None:
        async def on_complete(completed, total, result):
            raise RuntimeError("status store down")

        evaluator = MultiAgentEvaluator(llm, timeout_seconds=5)

        results = await evaluator.evaluate(
            agents_for_tier(Tier.BASIC), context, "text", on_agent_complete=on_complete
        )

        assert [result.agent_id for result in results] == ["structure", "references"]

    @pytest.mark.asyncio
    async def test_structure_agent_should_see_limited_window(self, llm, context) -> None:
        """Test the structure agent prompt is built from its text window only."""
        # Arrange
        prompts = {}
        original = llm.generate

        async def capture(model, prompt, system_prompt=None):
            prompts[llm.key_for(prompt, system_prompt)] = prompt
            return await original(model, prompt, system_prompt=system_prompt)

        llm.generate = capture
        text = "a" * 80_000 + "TAIL_MARKER"
        evaluator = MultiAgentEvaluator(llm, timeout_seconds=5)

        # Act
        await evaluator.evaluate(AGENT_REGISTRY, context, text)

        # Assert
        assert "TAIL_MARKER" not in prompts["structure"]
        assert "TAIL_MARKER" in prompts["methodology"]

    @pytest.mark.asyncio
    async def test_configured_text_window_should_override_registry(self, llm, context) -> None:
        # Arrange
        prompts = {}
        original = llm.generate

        async def capture(model, prompt, system_prompt=None):
            prompts[llm.key_for(prompt, system_prompt)] = prompt
            return await original(model, prompt, system_prompt=system_prompt)

        llm.generate = capture
        text = "a" * 1_000 + "TAIL_MARKER"
        evaluator = MultiAgentEvaluator(llm, timeout_seconds=5, text_windows={"structure": 1_000})

        # Act
        await evaluator.evaluate(agents_for_tier(Tier.BASIC), context, text)

        # Assert
        assert "TAIL_MARKER" not in prompts["structure"]
        assert "TAIL_MARKER" in prompts["references"]
