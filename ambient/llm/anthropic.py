"""
Anthropic LLM Provider

Implementation of BaseLLMProvider for Anthropic's Claude models.
"""

import logging

from anthropic import AsyncAnthropic

from ambient.llm.base import BaseLLMProvider
from ambient.llm.models import LLMRequest, LLMResponse, LLMUsage

logger = logging.getLogger(__name__)

# Anthropic requires an explicit output budget.
DEFAULT_MAX_TOKENS = 2048


class AnthropicProvider(BaseLLMProvider):
    """
    Anthropic (Claude) LLM provider implementation.

    Claude has no JSON response mode, so JSON requests get an extra system
    instruction and rely on the caller's lenient parsing.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        temperature: float = 0.3,
        max_tokens: int | None = None,
        timeout: int = 60,
    ):
        super().__init__(
            provider_name="anthropic",
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        self.client = AsyncAnthropic(api_key=api_key, timeout=float(timeout))

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate completion using Anthropic API."""
        request = self._apply_defaults(request)
        self._log_request(request)

        # Anthropic takes the system prompt separately
        system_parts = []
        messages = []
        for msg in request.messages:
            if msg.role == "system":
                system_parts.append(msg.content)
            else:
                messages.append({"role": msg.role, "content": msg.content})
        if request.response_format == "json":
            system_parts.append("Respond with a single JSON object and nothing else.")

        kwargs = dict(request.metadata)
        if system_parts:
            kwargs["system"] = "\n\n".join(system_parts)

        response = await self.client.messages.create(
            model=request.model or self.model,
            max_tokens=request.max_tokens or DEFAULT_MAX_TOKENS,
            temperature=request.temperature,
            messages=messages,
            **kwargs,
        )

        text = "".join(block.text for block in response.content if block.type == "text")
        llm_response = LLMResponse(
            content=text,
            model=response.model,
            usage=LLMUsage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            ),
            finish_reason=self._map_finish_reason(response.stop_reason),
            provider="anthropic",
            metadata={"id": response.id},
        )

        self._log_response(llm_response)
        return llm_response

    def _map_finish_reason(self, reason: str | None) -> str:
        """Map Anthropic stop reason to standard format."""
        if reason == "max_tokens":
            return "length"
        return "stop"
