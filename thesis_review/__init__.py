"""
Thesis review pipeline.

Multi-stage document evaluation: extract, pre-analyze, multi-agent deep
analysis, cross-validation and report aggregation, chained through a
message queue with a TTL-bounded status/result store between stages.
"""

__version__ = "0.1.0"
