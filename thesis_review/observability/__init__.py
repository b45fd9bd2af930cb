"""
Observability: logging setup, correlation IDs and HTTP middleware.
"""

from thesis_review.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from thesis_review.observability.logger import configure_logging

__all__ = [
    "configure_logging",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
]
