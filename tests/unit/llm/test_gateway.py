"""Tests for the LLM gateway's task profiles and parsing helpers."""

from unittest.mock import MagicMock, patch

import pytest

from ambient.config import Settings, TracingSettings
from ambient.llm.gateway import TASK_PROFILES, LLMGateway
from ambient.llm.models import PromptPair

PROMPT = PromptPair(system="You are a SQL expert.", user="Count users")


class TestProfiles:
    def test_evaluation_is_json_on_the_mini_model(self):
        profile = TASK_PROFILES["evaluate_sql"]

        assert profile.model == "mini"
        assert profile.json_mode is True
        assert profile.temperature == 0.2
        assert profile.evaluator is True

    @pytest.mark.parametrize(
        "task,temperature,max_tokens",
        [
            ("generate_sql", 0.3, 500),
            ("generate_joined_sql", 0.3, 2048),
            ("identify_tables", 0.3, 1024),
            ("refine_sql", 0.2, 600),
            ("interpret_results", 0.7, 500),
            ("chart_config", 0.2, 1500),
            ("analyze_schema", 0.7, 2000),
            ("generate_questions", 0.8, 1000),
        ],
    )
    def test_sampling_parameters(self, task, temperature, max_tokens):
        profile = TASK_PROFILES[task]

        assert profile.temperature == temperature
        assert profile.max_tokens == max_tokens

    def test_unknown_task(self, gateway):
        with pytest.raises(ValueError, match="Unknown LLM task"):
            gateway.profile("write_poetry")


class TestComplete:
    async def test_request_uses_profile(self, gateway, mock_llm_provider):
        mock_llm_provider.set_response('{"score": 1}')

        await gateway.complete("evaluate_sql", PROMPT)

        request = mock_llm_provider.last_request
        assert request.temperature == 0.2
        assert request.response_format == "json"
        assert [m.role for m in request.messages] == ["system", "user"]

    async def test_complete_sql_strips_fences(self, gateway, mock_llm_provider):
        mock_llm_provider.set_response("```sql\nSELECT count(*) FROM public.users;\n```")

        sql = await gateway.complete_sql("generate_sql", PROMPT)

        assert sql == "SELECT count(*) FROM public.users;"

    async def test_complete_json(self, gateway, mock_llm_provider):
        mock_llm_provider.set_response('Sure! {"score": 0.8}')

        assert await gateway.complete_json("evaluate_sql", PROMPT) == {"score": 0.8}

    async def test_complete_json_malformed(self, gateway, mock_llm_provider, caplog):
        mock_llm_provider.set_response("I cannot answer that")

        assert await gateway.complete_json("evaluate_sql", PROMPT) is None
        assert "malformed JSON" in caplog.text

    async def test_complete_json_list(self, gateway, mock_llm_provider):
        mock_llm_provider.set_response('["users", "orders"]')

        assert await gateway.complete_json_list("identify_tables", PROMPT) == ["users", "orders"]

    async def test_provider_errors_propagate(self, gateway, mock_llm_provider):
        mock_llm_provider.generate.side_effect = RuntimeError("rate limited")

        with pytest.raises(RuntimeError, match="rate limited"):
            await gateway.complete("generate_sql", PROMPT)


class TestProviderSelection:
    def test_providers_created_once(self):
        gateway = LLMGateway(settings=Settings())
        provider = MagicMock()
        with patch(
            "ambient.llm.gateway.LLMProviderFactory.create_default_provider",
            return_value=provider,
        ) as create:
            first = gateway.provider_for(TASK_PROFILES["generate_sql"])
            second = gateway.provider_for(TASK_PROFILES["interpret_results"])

        assert first is second is provider
        create.assert_called_once()

    def test_evaluator_tasks_use_agent_override(self):
        gateway = LLMGateway(settings=Settings())
        with patch(
            "ambient.llm.gateway.LLMProviderFactory.create_agent_provider",
            return_value=MagicMock(),
        ) as create:
            gateway.provider_for(TASK_PROFILES["evaluate_sql"])

        assert create.call_args.args[0] == "evaluator"
        assert create.call_args.args[2] == "mini"


class TestTracing:
    async def test_traced_task_goes_through_traceable(self, mock_llm_provider):
        settings = Settings(tracing=TracingSettings(tracing=True, api_key="lsv2-test-key"))
        gateway = LLMGateway(settings=settings, providers={("main", True): mock_llm_provider})
        mock_llm_provider.set_response('["users"]')

        with (
            patch("ambient.llm.gateway.Client") as client_cls,
            patch("ambient.llm.gateway.traceable") as traceable,
        ):
            traceable.return_value = lambda fn: fn
            await gateway.complete("identify_tables", PROMPT)

        traceable.assert_called_once()
        assert traceable.call_args.kwargs["name"] == "identify_tables"
        assert traceable.call_args.kwargs["client"] is client_cls.return_value

    async def test_untraced_task_skips_traceable(self, mock_llm_provider):
        settings = Settings(tracing=TracingSettings(tracing=True, api_key="lsv2-test-key"))
        gateway = LLMGateway(settings=settings, providers={("main", False): mock_llm_provider})
        mock_llm_provider.set_response("SELECT 1;")

        with patch("ambient.llm.gateway.traceable") as traceable:
            await gateway.complete("generate_sql", PROMPT)

        traceable.assert_not_called()

    def test_tracing_disabled_without_key(self):
        gateway = LLMGateway(settings=Settings(tracing=TracingSettings(tracing=True)))

        assert gateway.tracing_enabled is False
