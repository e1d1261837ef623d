"""Unit tests for SQLEvaluatorAgent."""

import json

import pytest

from ambient.agents.evaluator import SQLEvaluatorAgent, coerce_evaluation
from ambient.models.agent import SQLEvaluationInput


@pytest.fixture
def agent(gateway):
    return SQLEvaluatorAgent(gateway)


class TestCoerceEvaluation:
    def test_well_formed(self):
        evaluation = coerce_evaluation(
            {
                "score": 0.85,
                "summary": "Good query",
                "strengths": ["Uses schema-qualified names"],
                "issues": [],
                "suggestions": "Add ORDER BY",
            }
        )

        assert evaluation.score == 0.85
        assert evaluation.percent == 85
        assert evaluation.strengths == ["Uses schema-qualified names"]

    def test_missing_payload(self):
        evaluation = coerce_evaluation(None)

        assert evaluation.score == 0.0
        assert evaluation.summary == "No summary provided"
        assert evaluation.issues == []

    def test_malformed_fields_default(self):
        evaluation = coerce_evaluation(
            {"score": "excellent", "summary": "", "strengths": "many", "issues": ["a", None, " "]}
        )

        assert evaluation.score == 0.0
        assert evaluation.summary == "No summary provided"
        assert evaluation.strengths == []
        assert evaluation.issues == ["a"]
        assert evaluation.suggestions == ""

    def test_out_of_range_score(self):
        assert coerce_evaluation({"score": 8.5}).score == 0.0


class TestSQLEvaluatorAgent:
    async def test_scores_query(self, agent, mock_llm_provider, users_table):
        mock_llm_provider.set_response(
            json.dumps({"score": 0.95, "summary": "Correct", "strengths": ["Filters by date"]})
        )

        output = await agent(
            SQLEvaluationInput(
                query="Users in the last 30 days",
                sql="SELECT * FROM public.users WHERE created_at >= NOW() - INTERVAL '30 days';",
                schema_name="public",
                tables=[users_table],
            )
        )

        assert output.evaluation.score == 0.95
        request = mock_llm_provider.last_request
        assert request.response_format == "json"
        assert request.temperature == 0.2

    async def test_execution_error_reaches_prompt(self, agent, mock_llm_provider):
        mock_llm_provider.set_response('{"score": 0.1, "summary": "Broken"}')

        await agent(
            SQLEvaluationInput(
                query="Divide",
                sql="SELECT 1/0;",
                execution_success=False,
                execution_error="division by zero",
            )
        )

        assert "division by zero" in mock_llm_provider.last_request.messages[-1].content

    async def test_unparseable_output_scores_zero(self, agent, mock_llm_provider):
        mock_llm_provider.set_response("Looks fine to me!")

        output = await agent(SQLEvaluationInput(query="q", sql="SELECT 1;"))

        assert output.evaluation.score == 0.0
        assert output.evaluation.summary == "No summary provided"
