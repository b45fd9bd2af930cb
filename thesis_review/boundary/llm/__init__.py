"""Language model provider adapters."""

from thesis_review.boundary.llm.client import LangChainModelClient, LanguageModelClient

__all__ = ["LangChainModelClient", "LanguageModelClient"]
