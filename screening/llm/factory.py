# screening/llm/factory.py

"""
LLM Client Factory.

Creates the LangChain chat model used by the enrichment pass (Anthropic,
OpenAI or Groq) from application settings.
"""

from functools import lru_cache
from typing import Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_groq import ChatGroq
from langchain_openai import ChatOpenAI

from config.settings import LLMProvider, Settings
from screening.utils.logger import get_logger

logger = get_logger("LLMFactory")


class LLMFactory:
    """
    Creates and caches LangChain chat clients.

    Clients share the settings' temperature, max tokens and the enrichment
    timeout so a slow provider surfaces as a timeout error, not a hang.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def _get_openai_client(self, model_name: str) -> ChatOpenAI:
        return ChatOpenAI(
            model=model_name,
            temperature=self.settings.llm_temperature,
            max_tokens=self.settings.llm_max_tokens,
            timeout=self.settings.enrichment_timeout,
            max_retries=0,
            api_key=self.settings.openai_api_key,
        )

    def _get_anthropic_client(self, model_name: str) -> ChatAnthropic:
        return ChatAnthropic(
            model=model_name,
            temperature=self.settings.llm_temperature,
            max_tokens=self.settings.llm_max_tokens,
            timeout=self.settings.enrichment_timeout,
            max_retries=0,
            api_key=self.settings.anthropic_api_key,
        )

    def _get_groq_client(self, model_name: str) -> ChatGroq:
        return ChatGroq(
            model=model_name,
            temperature=self.settings.llm_temperature,
            max_tokens=self.settings.llm_max_tokens,
            timeout=self.settings.enrichment_timeout,
            max_retries=0,
            api_key=self.settings.groq_api_key,
        )

    @lru_cache(maxsize=3)
    def get_llm(
        self,
        provider: LLMProvider,
        model_name: Optional[str] = None,
    ) -> BaseChatModel:
        """
        Get a configured chat model. Clients are cached per provider/model.

        Raises:
            ValueError: If the provider has no API key configured.
        """
        if not model_name:
            model_name = self.settings.get_model_name(provider)

        if not self.settings.validate_provider(provider):
            raise ValueError(f"Provider {provider.value} is not configured (API key missing).")

        if provider == LLMProvider.OPENAI:
            return self._get_openai_client(model_name)
        elif provider == LLMProvider.ANTHROPIC:
            return self._get_anthropic_client(model_name)
        elif provider == LLMProvider.GROQ:
            return self._get_groq_client(model_name)
        raise ValueError(f"Unsupported LLM provider: {provider}")

    def get_llm_with_fallback(self, primary_provider: LLMProvider) -> BaseChatModel:
        """
        Get the primary provider's model, or the first configured fallback.

        Raises:
            ValueError: If neither the primary nor any fallback is configured.
        """
        try:
            return self.get_llm(primary_provider)
        except ValueError as primary_error:
            for fallback_provider in self.settings.get_fallback_providers(primary_provider):
                try:
                    llm = self.get_llm(fallback_provider)
                except ValueError:
                    continue
                logger.info(
                    f"Provider {primary_provider.value} unavailable, using {fallback_provider.value}"
                )
                return llm
            raise primary_error

    def get_enrichment_llm(self) -> Optional[BaseChatModel]:
        """
        The model for the enrichment pass, or None when no provider is usable.

        A missing credential is not an error: enrichment is simply skipped.
        """
        if not self.settings.enrichment_configured:
            logger.info("No LLM provider configured; enrichment pass disabled.")
            return None
        try:
            return self.get_llm_with_fallback(self.settings.default_llm_provider)
        except ValueError as e:
            logger.warning(f"Enrichment model unavailable: {e}")
            return None
