"""Scoring agents, multi-agent evaluation and cross-validation."""

from thesis_review.core.agents.cross_validator import CrossValidator, calibrate
from thesis_review.core.agents.evaluator import MultiAgentEvaluator
from thesis_review.core.agents.prompts import AnalysisContext
from thesis_review.core.agents.registry import (
    AGENT_REGISTRY,
    AgentConfig,
    agents_for_tier,
    category_key,
)

__all__ = [
    "CrossValidator",
    "calibrate",
    "MultiAgentEvaluator",
    "AnalysisContext",
    "AGENT_REGISTRY",
    "AgentConfig",
    "agents_for_tier",
    "category_key",
]
