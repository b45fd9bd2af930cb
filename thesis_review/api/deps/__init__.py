"""FastAPI dependencies."""

from thesis_review.api.deps.dependencies import (
    ServiceCache,
    get_analysis_service,
    get_cross_validate_stage,
    get_deep_analyze_stage,
    get_extract_stage,
    get_generate_report_stage,
    get_pre_analyze_stage,
    get_service_cache,
    get_signature_verifier,
)

__all__ = [
    "ServiceCache",
    "get_analysis_service",
    "get_cross_validate_stage",
    "get_deep_analyze_stage",
    "get_extract_stage",
    "get_generate_report_stage",
    "get_pre_analyze_stage",
    "get_service_cache",
    "get_signature_verifier",
]
