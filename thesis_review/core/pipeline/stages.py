"""
Pipeline stage table and tier routing.

The single source of truth for which stages a tier runs, in which order,
and where each stage's result is stored. Stage handlers never decide their
successor themselves; they ask ``next_stage``.

Dependencies: thesis_review.models.job
System role: Centralized tier-conditional branching
"""

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from thesis_review.models.job import Tier


class PipelineStage(str, Enum):
    """The five independently invocable stages."""

    EXTRACT = "extract"
    PRE_ANALYZE = "pre_analyze"
    DEEP_ANALYZE = "deep_analyze"
    CROSS_VALIDATE = "cross_validate"
    GENERATE_REPORT = "generate_report"


@dataclass(frozen=True)
class StageDefinition:
    """
    Static description of a stage.

    Attributes:
        stage: Stage identifier
        result_step: Step number the stage's result is stored under; fixed
            across tiers so downstream stages find it regardless of tier
        name: Display name shown in progress records
        path: Route of the stage endpoint, relative to the API prefix
        expected_seconds: Typical duration, used for ETA estimates
    """

    stage: PipelineStage
    result_step: int
    name: str
    path: str
    expected_seconds: int


STAGE_DEFINITIONS: MappingProxyType = MappingProxyType(
    {
        PipelineStage.EXTRACT: StageDefinition(
            PipelineStage.EXTRACT, 1, "Text Extraction", "/jobs/extract-text", 30
        ),
        PipelineStage.PRE_ANALYZE: StageDefinition(
            PipelineStage.PRE_ANALYZE, 2, "Pre-Analysis", "/jobs/pre-analyze", 20
        ),
        PipelineStage.DEEP_ANALYZE: StageDefinition(
            PipelineStage.DEEP_ANALYZE, 3, "Deep Analysis", "/jobs/deep-analyze", 120
        ),
        PipelineStage.CROSS_VALIDATE: StageDefinition(
            PipelineStage.CROSS_VALIDATE, 4, "Cross-Validation", "/jobs/cross-validate", 60
        ),
        PipelineStage.GENERATE_REPORT: StageDefinition(
            PipelineStage.GENERATE_REPORT, 5, "Report Generation", "/jobs/generate-report", 30
        ),
    }
)

TIER_SEQUENCES: MappingProxyType = MappingProxyType(
    {
        Tier.BASIC: (
            PipelineStage.EXTRACT,
            PipelineStage.PRE_ANALYZE,
            PipelineStage.GENERATE_REPORT,
        ),
        Tier.STANDARD: (
            PipelineStage.EXTRACT,
            PipelineStage.PRE_ANALYZE,
            PipelineStage.DEEP_ANALYZE,
            PipelineStage.GENERATE_REPORT,
        ),
        Tier.COMPREHENSIVE: (
            PipelineStage.EXTRACT,
            PipelineStage.PRE_ANALYZE,
            PipelineStage.DEEP_ANALYZE,
            PipelineStage.CROSS_VALIDATE,
            PipelineStage.GENERATE_REPORT,
        ),
    }
)


def get_stage(stage: PipelineStage) -> StageDefinition:
    """Look up a stage definition."""
    return STAGE_DEFINITIONS[stage]


def stage_sequence(tier: Tier) -> tuple[PipelineStage, ...]:
    """Ordered stages executed for a tier."""
    return TIER_SEQUENCES[tier]


def total_steps(tier: Tier) -> int:
    """Number of stages for a tier (basic=3, standard=4, comprehensive=5)."""
    return len(TIER_SEQUENCES[tier])


def step_position(tier: Tier, stage: PipelineStage) -> int:
    """
    1-based position of a stage within a tier's sequence.

    Raises:
        ValueError: The tier never runs this stage
    """
    sequence = TIER_SEQUENCES[tier]
    if stage not in sequence:
        raise ValueError(f"Stage {stage.value} is not part of the {tier.value} pipeline")
    return sequence.index(stage) + 1


def next_stage(tier: Tier, stage: PipelineStage) -> PipelineStage | None:
    """
    Stage to enqueue after ``stage`` completes, or None when terminal.

    Raises:
        ValueError: The tier never runs this stage
    """
    position = step_position(tier, stage)
    sequence = TIER_SEQUENCES[tier]
    if position >= len(sequence):
        return None
    return sequence[position]


def runs_stage(tier: Tier, stage: PipelineStage) -> bool:
    """Whether a tier's pipeline includes a stage."""
    return stage in TIER_SEQUENCES[tier]


@dataclass(frozen=True)
class TierPricing:
    """Page range and credit cost of a tier."""

    tier: Tier
    name: str
    min_pages: int
    max_pages: int
    credits: int


TIER_PRICING: tuple[TierPricing, ...] = (
    TierPricing(Tier.BASIC, "Basic Analysis", 1, 30, 10),
    TierPricing(Tier.STANDARD, "Standard Analysis", 31, 60, 25),
    TierPricing(Tier.COMPREHENSIVE, "Comprehensive Analysis", 61, 999, 50),
)


def estimate_page_count(char_count: int, chars_per_page: int = 2750) -> int:
    """Estimated page count from a character count."""
    return math.ceil(char_count / chars_per_page)


def pricing_for_pages(page_count: int) -> TierPricing:
    """Tier pricing for an estimated page count; out-of-range sizes are comprehensive."""
    for pricing in TIER_PRICING:
        if pricing.min_pages <= page_count <= pricing.max_pages:
            return pricing
    return TIER_PRICING[-1]


def pricing_for_tier(tier: Tier) -> TierPricing:
    """Pricing entry of a tier."""
    for pricing in TIER_PRICING:
        if pricing.tier == tier:
            return pricing
    raise ValueError(f"Unknown tier: {tier}")
