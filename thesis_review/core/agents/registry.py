"""
Scoring agent registry.

An immutable, process-wide table of the evaluation agents. Each entry fixes
the agent's model class, weight, rubric and prompt builder; tiers select a
subset of the table without ever mutating it.

Dependencies: thesis_review.core.agents.prompts
System role: Agent configuration
"""

from dataclasses import dataclass
from typing import Callable

from thesis_review.core.agents.prompts import (
    AnalysisContext,
    methodology_prompt,
    originality_prompt,
    references_prompt,
    structure_prompt,
    writing_prompt,
)
from thesis_review.models.job import Tier
from thesis_review.models.results import ModelClass

PromptBuilder = Callable[[AnalysisContext, str], str]


@dataclass(frozen=True)
class AgentConfig:
    """
    Static configuration of one scoring agent.

    Attributes:
        agent_id: Stable identifier, also the category key in results
        name: Display name used in progress messages
        model: Model class the agent runs on
        weight: Fixed contribution to the overall score
        system_prompt: Persona and rubric framing
        build_prompt: Builds the user prompt from context and text
        text_window: Characters of the document the agent sees (None = all)
    """

    agent_id: str
    name: str
    model: ModelClass
    weight: float
    system_prompt: str
    build_prompt: PromptBuilder
    text_window: int | None = None


AGENT_REGISTRY: tuple[AgentConfig, ...] = (
    AgentConfig(
        agent_id="structure",
        name="Structure Agent",
        model=ModelClass.FAST,
        weight=0.20,
        system_prompt=(
            "You are an expert in academic thesis structure and organization. "
            "You assess structure against Turkish Higher Education Council (YÖK) "
            "standards and international conventions. Be objective and constructive."
        ),
        build_prompt=structure_prompt,
        text_window=80_000,
    ),
    AgentConfig(
        agent_id="methodology",
        name="Methodology Agent",
        model=ModelClass.STRONG,
        weight=0.30,
        system_prompt=(
            "You are a research methodology expert. You assess research design, "
            "data collection and analysis techniques across quantitative, qualitative "
            "and mixed methods, with attention to validity, reliability and ethics."
        ),
        build_prompt=methodology_prompt,
    ),
    AgentConfig(
        agent_id="writing",
        name="Writing Quality Agent",
        model=ModelClass.STRONG,
        weight=0.25,
        system_prompt=(
            "You are an expert in academic writing in Turkish and English. You assess "
            "language use, argumentation and consistency of scientific terminology."
        ),
        build_prompt=writing_prompt,
    ),
    AgentConfig(
        agent_id="references",
        name="References Agent",
        model=ModelClass.FAST,
        weight=0.15,
        system_prompt=(
            "You are an expert in academic sources and citation formats such as APA, "
            "IEEE and Chicago. You weigh primary against secondary sources and value "
            "recent literature."
        ),
        build_prompt=references_prompt,
    ),
    AgentConfig(
        agent_id="originality",
        name="Originality Agent",
        model=ModelClass.STRONG,
        weight=0.10,
        system_prompt=(
            "You assess the originality of research and its contribution to the "
            "literature, distinguishing theoretical from practical contributions."
        ),
        build_prompt=originality_prompt,
    ),
)

# Basic tier keeps only the fast agents; weights are deliberately left as-is.
_BASIC_AGENT_IDS = frozenset({"structure", "references"})

# Report category key per agent id.
CATEGORY_KEYS = {"writing": "writing_quality"}


def agents_for_tier(tier: Tier) -> tuple[AgentConfig, ...]:
    """Registry subset for a tier, in registry order."""
    if tier == Tier.BASIC:
        return tuple(config for config in AGENT_REGISTRY if config.agent_id in _BASIC_AGENT_IDS)
    return AGENT_REGISTRY


def category_key(agent_id: str) -> str:
    """Report category key for an agent id (``writing`` -> ``writing_quality``)."""
    return CATEGORY_KEYS.get(agent_id, agent_id)
