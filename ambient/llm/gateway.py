"""
LLM Gateway

Single entry point for every model call. Each task has a fixed profile
(model tier, temperature, output budget, JSON mode, tracing) so agents never
pick models or sampling parameters themselves.

Usage:
    gateway = LLMGateway()
    sql = await gateway.complete_sql("generate_sql", prompt)
    verdict = await gateway.complete_json("evaluate_sql", prompt)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from langsmith import Client, traceable

from ambient.config import Settings, get_settings
from ambient.llm.base import BaseLLMProvider
from ambient.llm.factory import LLMProviderFactory
from ambient.llm.models import LLMRequest, PromptPair
from ambient.llm.parsing import extract_json_array, extract_json_object, strip_code_fences

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskProfile:
    """Fixed call parameters for one LLM task."""

    name: str
    model: Literal["main", "mini"]
    temperature: float
    max_tokens: int | None = None
    json_mode: bool = False
    traced: bool = False
    evaluator: bool = False


TASK_PROFILES: dict[str, TaskProfile] = {
    profile.name: profile
    for profile in (
        TaskProfile("generate_sql", "main", 0.3, 500),
        TaskProfile("generate_joined_sql", "main", 0.3, 2048, traced=True),
        TaskProfile("identify_tables", "main", 0.3, 1024, traced=True),
        TaskProfile("evaluate_sql", "mini", 0.2, json_mode=True, evaluator=True),
        TaskProfile("refine_sql", "main", 0.2, 600, traced=True),
        TaskProfile("interpret_results", "main", 0.7, 500),
        TaskProfile("chart_config", "main", 0.2, 1500),
        TaskProfile("erd_layout", "main", 0.3, json_mode=True),
        TaskProfile("analyze_schema", "main", 0.7, 2000),
        TaskProfile("generate_questions", "main", 0.8, 1000, json_mode=True),
        TaskProfile("eval_generate_sql", "mini", 0.3, 500, traced=True),
        TaskProfile("eval_judge_sql", "mini", 0.2, json_mode=True, evaluator=True),
    )
}


class LLMGateway:
    """
    Sends one chat completion per call using the task's profile.

    Providers are created on first use, so a missing API key only surfaces
    (as ``MissingConfigurationError``) when a task actually runs.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        providers: dict[tuple[str, bool], BaseLLMProvider] | None = None,
    ):
        self.settings = settings or get_settings()
        self._providers: dict[tuple[str, bool], BaseLLMProvider] = dict(providers or {})
        self._tracing_client: Client | None = None

    @property
    def tracing_enabled(self) -> bool:
        return self.settings.tracing.enabled

    def profile(self, task: str) -> TaskProfile:
        try:
            return TASK_PROFILES[task]
        except KeyError:
            raise ValueError(f"Unknown LLM task: {task}") from None

    def provider_for(self, profile: TaskProfile) -> BaseLLMProvider:
        """Provider for a profile's model tier, created once per gateway."""
        traced = profile.traced and self.tracing_enabled
        key = (profile.model, traced)
        if key in self._providers:
            return self._providers[key]
        # Untraced providers can stand in for traced ones (tests inject these).
        if (profile.model, False) in self._providers:
            return self._providers[(profile.model, False)]

        if profile.evaluator:
            provider = LLMProviderFactory.create_agent_provider(
                "evaluator", self.settings.llm, profile.model, trace=traced
            )
        else:
            provider = LLMProviderFactory.create_default_provider(
                self.settings.llm, profile.model, trace=traced
            )
        self._providers[key] = provider
        return provider

    def _tracing(self) -> Client:
        if self._tracing_client is None:
            self._tracing_client = Client(
                api_key=self.settings.tracing.api_key,
                api_url=self.settings.tracing.endpoint,
            )
        return self._tracing_client

    async def _invoke(self, profile: TaskProfile, prompt: PromptPair) -> str:
        provider = self.provider_for(profile)
        request = LLMRequest(
            messages=prompt.to_messages(),
            temperature=profile.temperature,
            max_tokens=profile.max_tokens,
            response_format="json" if profile.json_mode else "text",
        )
        response = await provider.generate(request)
        logger.debug(
            f"LLM task {profile.name} completed",
            extra={
                "task": profile.name,
                "model": response.model,
                "total_tokens": response.usage.total_tokens,
            },
        )
        return response.content

    async def complete(self, task: str, prompt: PromptPair) -> str:
        """Raw completion text for ``task``."""
        profile = self.profile(task)
        if profile.traced and self.tracing_enabled:
            traced_call = traceable(
                name=profile.name,
                run_type="chain",
                client=self._tracing(),
                project_name=self.settings.tracing.project,
                tags=["ambient-analytics"],
            )(self._invoke)
            return await traced_call(profile, prompt)
        return await self._invoke(profile, prompt)

    async def complete_sql(self, task: str, prompt: PromptPair) -> str:
        """Completion with Markdown code fences removed."""
        return strip_code_fences(await self.complete(task, prompt))

    async def complete_json(self, task: str, prompt: PromptPair) -> dict[str, Any] | None:
        """Completion parsed as a JSON object, ``None`` if it is not one."""
        text = await self.complete(task, prompt)
        value = extract_json_object(text)
        if value is None:
            logger.warning(f"LLM task {task} returned malformed JSON", extra={"task": task})
        return value

    async def complete_json_list(self, task: str, prompt: PromptPair) -> list[Any] | None:
        """Completion parsed as a JSON array, ``None`` if none is found."""
        return extract_json_array(await self.complete(task, prompt))
