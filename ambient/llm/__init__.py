"""
LLM Provider Module

Provider abstraction (OpenAI, Anthropic), a factory, and the task gateway
every agent calls through.

Usage:
    from ambient.llm import LLMGateway, PromptPair

    gateway = LLMGateway()
    sql = await gateway.complete_sql(
        "generate_sql",
        PromptPair(system="You are a SQL expert.", user="Count users"),
    )
"""

from ambient.llm.anthropic import AnthropicProvider
from ambient.llm.base import BaseLLMProvider
from ambient.llm.factory import LLMProviderFactory
from ambient.llm.gateway import TASK_PROFILES, LLMGateway, TaskProfile
from ambient.llm.models import LLMMessage, LLMRequest, LLMResponse, LLMUsage, PromptPair
from ambient.llm.openai import OpenAIProvider

__all__ = [
    "BaseLLMProvider",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMUsage",
    "PromptPair",
    "LLMProviderFactory",
    "LLMGateway",
    "TaskProfile",
    "TASK_PROFILES",
    "OpenAIProvider",
    "AnthropicProvider",
]
