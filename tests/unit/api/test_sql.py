"""Unit tests for the SQL routes."""

import asyncpg

from ambient.connectors.base import ConnectionError
from ambient.models.agent import (
    AgentError,
    LLMOutputError,
    SQLEvaluationOutput,
    SQLGenerationOutput,
    SQLRefinementOutput,
    TableIdentifierOutput,
)
from ambient.models.results import ExecutionOutcome, QueryResult, SQLEvaluation


class TestExecuteSQL:
    def test_rows(self, client, mock_pipeline):
        mock_pipeline.executor.execute.return_value = ExecutionOutcome(
            result=QueryResult(columns=["n"], rows=[{"n": 1}], row_count=1)
        )

        response = client.post("/api/execute-sql", json={"env": "dev", "sql": "SELECT 1 AS n"})

        assert response.status_code == 200
        assert response.json() == {
            "result": {"columns": ["n"], "rows": [{"n": 1}], "rowCount": 1},
            "error": None,
        }

    def test_binary_and_range_values_are_serialized(self, client, mock_pipeline):
        period = asyncpg.Range(1, 5)
        mock_pipeline.executor.execute.return_value = ExecutionOutcome(
            result=QueryResult(
                columns=["b", "r"], rows=[{"b": b"\xde\xad\xbe\xef", "r": period}], row_count=1
            )
        )

        response = client.post(
            "/api/execute-sql", json={"env": "dev", "sql": "SELECT payload, int4range(1, 5)"}
        )

        assert response.status_code == 200
        assert response.json()["result"]["rows"] == [{"b": "\\xdeadbeef", "r": str(period)}]

    def test_database_error_is_200(self, client, mock_pipeline):
        mock_pipeline.executor.execute.return_value = ExecutionOutcome(error="division by zero")

        response = client.post("/api/execute-sql", json={"env": "dev", "sql": "SELECT 1/0"})

        assert response.status_code == 200
        assert response.json() == {"result": None, "error": "division by zero"}

    def test_required_fields(self, client, mock_pipeline):
        response = client.post("/api/execute-sql", json={"env": "dev"})

        assert response.status_code == 400
        assert response.json() == {"error": "Environment and SQL are required"}

    def test_connection_failure(self, client, mock_pipeline):
        mock_pipeline.executor.execute.side_effect = ConnectionError("refused")

        response = client.post("/api/execute-sql", json={"env": "dev", "sql": "SELECT 1"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to execute SQL"}


class TestGenerateSQL:
    def test_single_table(self, client, mock_pipeline, users_payload):
        mock_pipeline.sql.return_value = SQLGenerationOutput(
            sql="SELECT * FROM public.users WHERE created_at >= NOW() - INTERVAL '30 days'"
        )

        response = client.post(
            "/api/generate-sql",
            json={
                "env": "dev",
                "schema": "public",
                "table": "users",
                "naturalLanguageQuery": "Show me all users who signed up in the last 30 days",
                "columns": users_payload["columns"],
                "sampleData": {"columns": ["id"], "rows": [{"id": 1}]},
            },
        )

        assert response.status_code == 200
        assert "INTERVAL '30 days'" in response.json()["sql"]
        generation_input = mock_pipeline.sql.await_args.args[0]
        assert generation_input.joined is False
        assert generation_input.sample_rows == [{"id": 1}]
        assert generation_input.tables[0].columns[1].max_length == 255

    def test_required_fields(self, client, mock_pipeline):
        response = client.post("/api/generate-sql", json={"env": "dev", "schema": "public"})

        assert response.status_code == 400
        assert response.json() == {
            "error": "Environment, schema, table, and natural language query are required"
        }

    def test_failure(self, client, mock_pipeline):
        mock_pipeline.sql.side_effect = AgentError("SQLAgent", "down")

        response = client.post(
            "/api/generate-sql",
            json={"env": "dev", "schema": "public", "table": "users", "naturalLanguageQuery": "q"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate SQL"}


class TestGenerateJoinedSQL:
    def test_joined(self, client, mock_pipeline, users_payload):
        mock_pipeline.sql.return_value = SQLGenerationOutput(sql="SELECT 1;")

        response = client.post(
            "/api/generate-joined-sql",
            json={
                "query": "Users and their orders",
                "schema": "public",
                "tablesWithColumns": [users_payload, {"name": "orders", "columns": []}],
                "conversationContext": [{"role": "user", "content": "Show users"}],
            },
        )

        assert response.status_code == 200
        assert response.json() == {"sql": "SELECT 1;"}
        generation_input = mock_pipeline.sql.await_args.args[0]
        assert generation_input.joined is True
        assert [t.table for t in generation_input.tables] == ["users", "orders"]
        assert generation_input.conversation[0].content == "Show users"

    def test_tables_required(self, client, mock_pipeline):
        response = client.post("/api/generate-joined-sql", json={"query": "q"})

        assert response.status_code == 400
        assert response.json() == {"error": "Query and tablesWithColumns array are required"}

    def test_empty_tables(self, client, mock_pipeline):
        response = client.post(
            "/api/generate-joined-sql", json={"query": "q", "tablesWithColumns": []}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate SQL query"}
        mock_pipeline.sql.assert_not_awaited()


class TestIdentifyTables:
    def test_identify(self, client, mock_pipeline):
        mock_pipeline.table_identifier.return_value = TableIdentifierOutput(
            relevant_tables=["orders"]
        )

        response = client.post(
            "/api/identify-relevant-tables",
            json={"query": "Total revenue", "tables": ["users", "orders"]},
        )

        assert response.status_code == 200
        assert response.json() == {"relevantTables": ["orders"]}

    def test_tables_required(self, client, mock_pipeline):
        response = client.post("/api/identify-relevant-tables", json={"query": "q"})

        assert response.status_code == 400
        assert response.json() == {"error": "Query and tables array are required"}

    def test_failure(self, client, mock_pipeline):
        mock_pipeline.table_identifier.side_effect = AgentError("TableIdentifierAgent", "down")

        response = client.post(
            "/api/identify-relevant-tables", json={"query": "q", "tables": ["users"]}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to identify relevant tables"}


class TestEvaluateSQLQuery:
    def test_evaluate(self, client, mock_pipeline):
        mock_pipeline.evaluator.return_value = SQLEvaluationOutput(
            evaluation=SQLEvaluation(score=0.8, summary="Good", strengths=["Clear"])
        )

        response = client.post(
            "/api/evaluate-sql-query",
            json={
                "question": "Count users",
                "generatedSQL": "SELECT count(*) FROM public.users;",
                "schema": "public",
                "executionSuccess": False,
                "executionError": "relation does not exist",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["evaluation"]["score"] == 0.8
        evaluation_input = mock_pipeline.evaluator.await_args.args[0]
        assert evaluation_input.execution_success is False
        assert evaluation_input.execution_error == "relation does not exist"

    def test_required_fields(self, client, mock_pipeline):
        response = client.post("/api/evaluate-sql-query", json={"question": "q"})

        assert response.status_code == 400
        assert response.json() == {"error": "Question and generated SQL are required"}

    def test_failure_reports_message(self, client, mock_pipeline):
        mock_pipeline.evaluator.side_effect = AgentError("SQLEvaluatorAgent", "Unexpected error: 429")

        response = client.post(
            "/api/evaluate-sql-query", json={"question": "q", "generatedSQL": "SELECT 1"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Unexpected error: 429"}

    def test_status(self, client):
        response = client.get("/api/evaluate-sql-query")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        assert "real-time quality feedback" in response.json()["description"]


class TestRefineSQL:
    def test_refine(self, client, mock_pipeline):
        mock_pipeline.refiner.return_value = SQLRefinementOutput(refined_sql="SELECT 2;")

        response = client.post(
            "/api/refine-sql",
            json={
                "question": "q",
                "originalSQL": "SELECT 1;",
                "evaluation": {"score": 0.4, "summary": "Wrong", "issues": ["Wrong value"]},
                "executionResult": {"success": True, "rowCount": 1, "columns": ["?column?"]},
                "schema": "public",
            },
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "refinedSQL": "SELECT 2;"}
        refinement_input = mock_pipeline.refiner.await_args.args[0]
        assert refinement_input.evaluation.issues == ["Wrong value"]
        assert refinement_input.execution.row_count == 1

    def test_evaluation_required(self, client, mock_pipeline):
        response = client.post("/api/refine-sql", json={"question": "q", "originalSQL": "SELECT 1"})

        assert response.status_code == 400
        assert response.json() == {"error": "Question, original SQL, and evaluation are required"}

    def test_failure(self, client, mock_pipeline):
        mock_pipeline.refiner.side_effect = LLMOutputError("SQLRefinerAgent", "Model returned no refined SQL")

        response = client.post(
            "/api/refine-sql",
            json={"question": "q", "originalSQL": "SELECT 1", "evaluation": {"score": 0.2}},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Model returned no refined SQL"}

    def test_status(self, client):
        assert "improves SQL" in client.get("/api/refine-sql").json()["description"]


def test_malformed_body_is_400(client, mock_pipeline):
    response = client.post("/api/execute-sql", json={"env": "dev", "sql": ["not", "a", "string"]})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request:")
