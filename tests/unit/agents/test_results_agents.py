"""Unit tests for InterpreterAgent and ChartConfigAgent."""

import json

import pytest

from ambient.agents.chart import ChartConfigAgent
from ambient.agents.interpreter import InterpreterAgent
from ambient.models.agent import ChartConfigInput, InterpretationInput, LLMOutputError
from ambient.models.results import QueryResult


class TestInterpreterAgent:
    async def test_interpretation_text(self, gateway, mock_llm_provider, sample_result):
        mock_llm_provider.set_response("  a@example.com placed the most orders.\n")

        output = await InterpreterAgent(gateway)(
            InterpretationInput(query="Who ordered most?", sql="SELECT ...", result=sample_result)
        )

        assert output.interpretation == "a@example.com placed the most orders."
        assert mock_llm_provider.last_request.temperature == 0.7

    async def test_empty_result_is_still_interpreted(self, gateway, mock_llm_provider):
        mock_llm_provider.set_response("No rows matched.")

        output = await InterpreterAgent(gateway)(
            InterpretationInput(query="Any refunds?", sql="SELECT ...", result=QueryResult())
        )

        assert output.interpretation == "No rows matched."
        assert "Results (0 rows)" in mock_llm_provider.last_request.messages[-1].content


class TestChartConfigAgent:
    async def test_valid_config(self, gateway, mock_llm_provider, sample_result):
        config = {
            "type": "bar",
            "data": {"labels": ["a@example.com", "b@example.com"], "datasets": [{"data": [3, 1]}]},
            "options": {"responsive": True},
        }
        mock_llm_provider.set_response(f"```json\n{json.dumps(config)}\n```")

        output = await ChartConfigAgent(gateway)(
            ChartConfigInput(query="Orders per user", result=sample_result)
        )

        assert output.chart_config == config

    @pytest.mark.parametrize(
        "response",
        ["not a chart", '{"data": {"labels": []}}', '{"type": "bar"}'],
    )
    async def test_invalid_config_raises(self, gateway, mock_llm_provider, sample_result, response):
        mock_llm_provider.set_response(response)

        with pytest.raises(LLMOutputError, match="Failed to parse chart configuration"):
            await ChartConfigAgent(gateway)(
                ChartConfigInput(query="Orders per user", result=sample_result)
            )
