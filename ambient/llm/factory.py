"""
LLM Provider Factory

Creates LLM provider instances from configuration.
Supports OpenAI and Anthropic, each with a main and a lightweight model.
"""

import logging
from typing import Literal

from ambient.config import LLMSettings, MissingConfigurationError
from ambient.llm.anthropic import AnthropicProvider
from ambient.llm.base import BaseLLMProvider
from ambient.llm.openai import OpenAIProvider

logger = logging.getLogger(__name__)

ProviderType = Literal["openai", "anthropic"]
ModelType = Literal["main", "mini"]


class LLMProviderFactory:
    """Factory for creating LLM provider instances."""

    PROVIDERS = {
        "openai": OpenAIProvider,
        "anthropic": AnthropicProvider,
    }

    @staticmethod
    def create_provider(
        provider_type: ProviderType,
        config: LLMSettings,
        model_type: ModelType = "main",
        trace: bool = False,
    ) -> BaseLLMProvider:
        """
        Create an LLM provider instance.

        Args:
            provider_type: Type of provider to create
            config: LLM configuration settings
            model_type: Use main model or mini model (default: main)
            trace: Record completions with LangSmith (OpenAI only)

        Raises:
            ValueError: If provider type is unknown
            MissingConfigurationError: If the provider's API key is not set
        """
        if provider_type not in LLMProviderFactory.PROVIDERS:
            raise ValueError(
                f"Unknown provider type: {provider_type}. "
                f"Available providers: {list(LLMProviderFactory.PROVIDERS.keys())}"
            )

        logger.info(
            f"Creating {provider_type} provider with {model_type} model",
            extra={"provider": provider_type, "model_type": model_type},
        )

        if provider_type == "openai":
            return LLMProviderFactory._create_openai(config, model_type, trace)
        return LLMProviderFactory._create_anthropic(config, model_type)

    @staticmethod
    def create_default_provider(
        config: LLMSettings,
        model_type: ModelType = "main",
        trace: bool = False,
    ) -> BaseLLMProvider:
        """Create provider using default_provider from config."""
        return LLMProviderFactory.create_provider(
            config.default_provider, config, model_type, trace
        )

    @staticmethod
    def create_agent_provider(
        agent_name: str,
        config: LLMSettings,
        model_type: ModelType = "main",
        trace: bool = False,
    ) -> BaseLLMProvider:
        """
        Create provider for a specific agent with override support.

        Checks for an agent-specific override (e.g. ``evaluator_provider``) and
        falls back to ``default_provider``.
        """
        provider_type = getattr(config, f"{agent_name}_provider", None) or config.default_provider
        return LLMProviderFactory.create_provider(provider_type, config, model_type, trace)

    @staticmethod
    def _create_openai(config: LLMSettings, model_type: ModelType, trace: bool) -> OpenAIProvider:
        if not config.openai_api_key:
            raise MissingConfigurationError("OpenAI API key not configured", setting="OPENAI_API_KEY")

        model = config.openai_model if model_type == "main" else config.openai_model_mini
        return OpenAIProvider(
            api_key=config.openai_api_key,
            model=model,
            timeout=config.timeout,
            trace=trace,
        )

    @staticmethod
    def _create_anthropic(config: LLMSettings, model_type: ModelType) -> AnthropicProvider:
        if not config.anthropic_api_key:
            raise MissingConfigurationError(
                "Anthropic API key not configured", setting="ANTHROPIC_API_KEY"
            )

        model = config.anthropic_model if model_type == "main" else config.anthropic_model_mini
        return AnthropicProvider(
            api_key=config.anthropic_api_key,
            model=model,
            timeout=config.timeout,
        )
