"""Tests for prompt builders."""

from ambient.models.conversation import ConversationTurn, TurnResultSummary
from ambient.models.results import ExecutionOutcome, ExecutionSummary, QueryResult, SQLEvaluation
from ambient.models.schema import ColumnDescriptor, ForeignKey
from ambient.prompts import builders


class TestFormatting:
    def test_column_line(self):
        column = ColumnDescriptor(name="email", type="character varying", max_length=255)

        assert builders.format_column_line(column) == "  - email: character varying(255) NOT NULL"

    def test_column_line_with_default(self):
        column = ColumnDescriptor(name="created_at", type="timestamp", nullable=True, default="now()")

        assert builders.format_column_line(column) == "  - created_at: timestamp NULL DEFAULT now()"

    def test_conversation_lines(self):
        turns = [
            ConversationTurn(role="user", content="How many users?"),
            ConversationTurn(
                role="assistant",
                content="There are 42 users.",
                relevant_tables=["users"],
                sql="SELECT count(*) FROM public.users;",
                result=TurnResultSummary(row_count=1),
            ),
        ]

        text = builders.format_conversation(turns)

        assert text.splitlines()[0] == "1. User: How many users?"
        assert "2. Assistant: There are 42 users." in text
        assert "   Tables used: users" in text
        assert "   SQL: SELECT count(*) FROM public.users;" in text
        assert "   Result: 1 rows" in text

    def test_empty_conversation(self):
        assert builders.format_conversation([]) == ""

    def test_schema_context_totals(self, users_table, orders_table):
        context = builders.format_schema_context("public", [users_table, orders_table])

        assert "Total Tables: 2" in context
        assert "Total Columns: 6" in context
        assert "1. Table: public.users (BASE TABLE)" in context

    def test_compact_schema_context(self, users_table):
        context = builders.format_schema_context("public", [users_table], detailed=False)

        assert "Tables Overview:" in context
        assert "public.users:" in context
        assert "Total Tables" not in context


class TestSQLPrompts:
    def test_single_table_prompt(self, users_table):
        prompt = builders.build_sql_generation_prompt(
            "public",
            "users",
            users_table.columns,
            "Show me all users who signed up in the last 30 days",
            sample_rows=[{"id": i} for i in range(5)],
        )

        assert "schema-qualified" in prompt.system
        assert "Sample Data (first 3 rows)" in prompt.user
        assert '"id": 2' in prompt.user
        assert '"id": 3' not in prompt.user
        assert "email: character varying(255) NOT NULL" in prompt.user

    def test_single_table_prompt_without_samples(self, users_table):
        prompt = builders.build_sql_generation_prompt("public", "users", users_table.columns, "Count")

        assert "No sample data available" in prompt.user

    def test_prompt_is_deterministic(self, users_table):
        first = builders.build_joined_sql_prompt("public", "Count users", [users_table])
        second = builders.build_joined_sql_prompt("public", "Count users", [users_table])

        assert first == second

    def test_joined_prompt_includes_history(self, users_table, orders_table):
        history = [ConversationTurn(role="user", content="Show users")]

        prompt = builders.build_joined_sql_prompt(
            "sales", "Now with their orders", [users_table, orders_table], history
        )

        assert "Conversation History:" in prompt.user
        assert "1. User: Show users" in prompt.user
        assert "sales.table_name" in prompt.user
        assert "Table: orders" in prompt.user

    def test_joined_prompt_without_history(self, users_table):
        prompt = builders.build_joined_sql_prompt(None, "Count users", [users_table])

        assert "Conversation History" not in prompt.user
        assert "public.table_name" in prompt.user

    def test_table_identification_is_single_message(self):
        prompt = builders.build_table_identification_prompt("Top customers", ["users", "orders"])

        assert prompt.system is None
        assert "1. users" in prompt.user
        assert "2. orders" in prompt.user
        assert "JSON array" in prompt.user


class TestEvaluationPrompts:
    def test_failed_execution(self):
        prompt = builders.build_sql_evaluation_prompt(
            "Divide", "SELECT 1/0;", execution_success=False, execution_error="division by zero"
        )

        assert "failed to execute with error: division by zero" in prompt.user
        assert "Actual Query Results" not in prompt.user

    def test_successful_execution_with_results(self, users_table, sample_result):
        prompt = builders.build_sql_evaluation_prompt(
            "Orders per user",
            "SELECT ...",
            schema="public",
            tables=[users_table],
            result=sample_result,
        )

        assert "Rows returned: 2" in prompt.user
        assert "Columns: email, order_count" in prompt.user
        assert "public.users:" in prompt.user

    def test_refinement_prompt(self, users_table):
        evaluation = SQLEvaluation(
            score=0.6,
            summary="Misses the date filter",
            strengths=["Valid syntax"],
            issues=["No WHERE clause"],
            suggestions="Filter on created_at",
        )
        execution = ExecutionSummary.from_outcome(
            ExecutionOutcome(error='column "signup" does not exist')
        )

        prompt = builders.build_sql_refinement_prompt(
            "Recent users", "SELECT * FROM users", evaluation, execution, "public", [users_table]
        )

        assert "Score: 60%" in prompt.user
        assert "- No WHERE clause" in prompt.user
        assert "Status: FAILED" in prompt.user
        assert "Fix the execution error" in prompt.user
        assert "email: character varying NOT NULL" in prompt.user


class TestResultPrompts:
    def test_interpretation_truncates_rows(self):
        result = QueryResult(
            columns=["n"], rows=[{"n": i} for i in range(12)], row_count=12
        )

        prompt = builders.build_interpretation_prompt("Numbers", "SELECT n", result)

        assert "Results (12 rows)" in prompt.user
        assert "(Showing first 10 of 12 total rows)" in prompt.user
        assert '"n": 11' not in prompt.user

    def test_chart_prompt_defaults(self, sample_result):
        prompt = builders.build_chart_config_prompt("Orders per user", sample_result)

        assert "SQL Query: N/A" in prompt.user
        assert "Columns: email, order_count" in prompt.user

    def test_erd_prompt_lists_relationships(self, users_table, orders_table):
        fk = ForeignKey(
            from_table="orders",
            from_column="user_id",
            to_table="users",
            to_column="id",
            constraint_name="orders_user_id_fkey",
        )

        prompt = builders.build_erd_layout_prompt([users_table, orders_table], [fk])

        assert "orders.user_id -> users.id" in prompt.user

    def test_question_prompt_includes_analysis(self, users_table):
        prompt = builders.build_question_generation_prompt(
            "public", [users_table], schema_analysis="A user registry."
        )

        assert "Previous Schema Analysis:\nA user registry." in prompt.user
