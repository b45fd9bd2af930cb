"""
Language model client.

Maps the pipeline's model classes onto concrete LangChain chat models:
Gemini (fast and strong classes) for pre-analysis and the scoring agents,
Claude on Bedrock for the independent cross-validation pass.

Dependencies: langchain_core, langchain_google_genai, langchain_aws
System role: Outbound language model provider adapter
"""

import logging
from abc import ABC, abstractmethod

from langchain_aws import ChatBedrockConverse
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from thesis_review.configs.llm import LLMSettings
from thesis_review.core.exceptions import LLMProviderError
from thesis_review.models.results import ModelClass

logger = logging.getLogger(__name__)


class LanguageModelClient(ABC):
    """Text-in, text-out access to a model class."""

    @abstractmethod
    async def generate(
        self,
        model: ModelClass,
        prompt: str,
        system_prompt: str | None = None,
    ) -> str:
        """
        Run one completion.

        Args:
            model: Model class to use
            prompt: User prompt
            system_prompt: Optional system instruction

        Returns:
            str: Raw response text

        Raises:
            LLMProviderError: The provider call failed
        """

    def model_id(self, model: ModelClass) -> str:
        """Identifier of the concrete model behind a class, for audit records."""
        return model.value


class LangChainModelClient(LanguageModelClient):
    """LangChain-backed client; chat models are built lazily and reused."""

    def __init__(self, settings: LLMSettings) -> None:
        self._settings = settings
        self._models: dict[ModelClass, BaseChatModel] = {}

    def model_id(self, model: ModelClass) -> str:
        return {
            ModelClass.FAST: self._settings.fast_model_id,
            ModelClass.STRONG: self._settings.strong_model_id,
            ModelClass.VALIDATOR: self._settings.validator_model_id,
        }[model]

    def _build(self, model: ModelClass) -> BaseChatModel:
        settings = self._settings
        if model == ModelClass.VALIDATOR:
            return ChatBedrockConverse(
                model=settings.validator_model_id,
                region_name=settings.bedrock_region,
                temperature=settings.validator_temperature,
                max_tokens=settings.validator_max_output_tokens,
            )
        if model == ModelClass.STRONG:
            return ChatGoogleGenerativeAI(
                model=settings.strong_model_id,
                temperature=settings.strong_temperature,
                max_output_tokens=settings.strong_max_output_tokens,
            )
        return ChatGoogleGenerativeAI(
            model=settings.fast_model_id,
            temperature=settings.fast_temperature,
            max_output_tokens=settings.fast_max_output_tokens,
        )

    def _chat_model(self, model: ModelClass) -> BaseChatModel:
        if model not in self._models:
            self._models[model] = self._build(model)
            logger.info(
                "_chat_model - Initialized chat model",
                extra={"model_class": model.value, "model_id": self.model_id(model)},
            )
        return self._models[model]

    async def generate(
        self,
        model: ModelClass,
        prompt: str,
        system_prompt: str | None = None,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))

        try:
            response = await self._chat_model(model).ainvoke(messages)
        except Exception as e:
            logger.warning(
                f"generate - Provider call failed: {type(e).__name__}: {e}",
                extra={"model_class": model.value},
            )
            raise LLMProviderError(str(e), model_id=self.model_id(model)) from e

        return _response_text(response.content)


def _response_text(content) -> str:
    """Flatten LangChain message content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)
