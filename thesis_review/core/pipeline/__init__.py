"""
Pipeline routing, parsing and deterministic text processing.
"""

from thesis_review.core.pipeline.parse_result import (
    Degraded,
    Ok,
    ParseResult,
    extract_json_object,
    parse_model_output,
)
from thesis_review.core.pipeline.stages import (
    STAGE_DEFINITIONS,
    TIER_PRICING,
    PipelineStage,
    StageDefinition,
    TierPricing,
    estimate_page_count,
    get_stage,
    next_stage,
    pricing_for_pages,
    pricing_for_tier,
    runs_stage,
    stage_sequence,
    step_position,
    total_steps,
)

__all__ = [
    "Degraded",
    "Ok",
    "ParseResult",
    "extract_json_object",
    "parse_model_output",
    "STAGE_DEFINITIONS",
    "TIER_PRICING",
    "PipelineStage",
    "StageDefinition",
    "TierPricing",
    "estimate_page_count",
    "get_stage",
    "next_stage",
    "pricing_for_pages",
    "pricing_for_tier",
    "runs_stage",
    "stage_sequence",
    "step_position",
    "total_steps",
]
