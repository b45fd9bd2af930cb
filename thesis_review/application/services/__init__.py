"""Job-level services."""

from thesis_review.application.services.analysis_service import AnalysisService, StartedAnalysis
from thesis_review.application.services.failure_handler import JobFailureHandler

__all__ = ["AnalysisService", "StartedAnalysis", "JobFailureHandler"]
