"""
OpenAI LLM Provider

Implementation of BaseLLMProvider for OpenAI's chat models (gpt-4o, gpt-4o-mini).
"""

import logging

import openai
from langsmith.wrappers import wrap_openai
from openai import AsyncOpenAI

from ambient.llm.base import BaseLLMProvider
from ambient.llm.models import LLMRequest, LLMResponse, LLMUsage

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseLLMProvider):
    """
    OpenAI LLM provider implementation.

    Uses the official openai SDK with async support. When ``trace`` is set the
    client is wrapped with LangSmith's ``wrap_openai`` so every completion is
    recorded as a run.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        temperature: float = 0.3,
        max_tokens: int | None = None,
        timeout: int = 60,
        trace: bool = False,
    ):
        super().__init__(
            provider_name="openai",
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )

        client = AsyncOpenAI(api_key=api_key, timeout=float(timeout))
        self.client = wrap_openai(client) if trace else client
        self.traced = trace

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate completion using OpenAI API.

        Raises:
            openai.APIError: On API errors
            openai.APITimeoutError: On timeout
        """
        request = self._apply_defaults(request)
        self._log_request(request)

        params = dict(request.metadata)
        if request.max_tokens is not None:
            params["max_tokens"] = request.max_tokens
        if request.response_format == "json":
            params["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(
                model=request.model or self.model,
                messages=[{"role": msg.role, "content": msg.content} for msg in request.messages],
                temperature=request.temperature,
                **params,
            )
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI API timeout: {e}")
            raise
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise

        usage = response.usage
        llm_response = LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            usage=LLMUsage(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
            finish_reason=self._map_finish_reason(response.choices[0].finish_reason),
            provider="openai",
            metadata={"id": response.id},
        )

        self._log_response(llm_response)
        return llm_response

    def _map_finish_reason(self, reason: str | None) -> str:
        """Map OpenAI finish reason to our standard format."""
        if reason in ("stop", "length", "content_filter"):
            return reason
        return "stop"
