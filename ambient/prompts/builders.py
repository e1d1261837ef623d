"""
Prompt Builders

Pure functions that turn schema metadata, results and conversation history
into a ``PromptPair`` for one LLM task. The same inputs always render the
same prompt text.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from ambient.llm.models import PromptPair
from ambient.models.conversation import ConversationTurn
from ambient.models.results import ExecutionSummary, QueryResult, SQLEvaluation
from ambient.models.schema import ColumnDescriptor, ForeignKey, TableWithColumns
from ambient.prompts.loader import PromptLoader


@lru_cache
def get_loader() -> PromptLoader:
    return PromptLoader()


def _render(task_dir: str, system: bool = True, **variables: Any) -> PromptPair:
    loader = get_loader()
    return PromptPair(
        system=loader.render(f"{task_dir}/system.md") if system else None,
        user=loader.render(f"{task_dir}/user.md", **variables),
    )


# ============================================================================
# Formatting helpers
# ============================================================================


def to_json(value: Any) -> str:
    """Pretty JSON for prompt context; dates and decimals become strings."""
    return json.dumps(value, indent=2, default=str)


def format_column_type(column: ColumnDescriptor) -> str:
    """``type`` or ``type(maxLength)``."""
    return column.type_label


def format_column_line(column: ColumnDescriptor) -> str:
    """``  - name: type(len) NULL|NOT NULL [DEFAULT x]``"""
    nullability = "NULL" if column.nullable else "NOT NULL"
    default = f" DEFAULT {column.default}" if column.default else ""
    return f"  - {column.name}: {format_column_type(column)} {nullability}{default}"


def format_joined_schema(tables: Sequence[TableWithColumns]) -> str:
    blocks = []
    for entry in tables:
        columns = "\n".join(
            f"  - {col.name} ({col.data_type}, {'nullable' if col.nullable else 'not null'})"
            for col in entry.columns
        )
        blocks.append(f"Table: {entry.table}\nColumns:\n{columns}")
    return "\n\n".join(blocks)


def format_schema_listing(
    schema: str, tables: Sequence[TableWithColumns], nullability: bool = False
) -> str:
    """Indented ``schema.table`` blocks used by the evaluator and refiner."""
    blocks = []
    for entry in tables:
        lines = []
        for col in entry.columns:
            line = f"    - {col.name}: {col.data_type}"
            if nullability:
                line += " NULL" if col.nullable else " NOT NULL"
            lines.append(line)
        blocks.append(f"  {schema}.{entry.table}:\n" + "\n".join(lines))
    return "\n\n".join(blocks)


def format_conversation(
    turns: Sequence[ConversationTurn], tables_label: str = "Tables used"
) -> str:
    """Numbered history lines; empty string when there is no history."""
    lines = []
    for idx, turn in enumerate(turns, start=1):
        speaker = "User" if turn.role == "user" else "Assistant"
        text = f"{idx}. {speaker}: {turn.content}"
        if turn.relevant_tables:
            text += f"\n   {tables_label}: {', '.join(turn.relevant_tables)}"
        if turn.sql:
            text += f"\n   SQL: {turn.sql}"
        if turn.result is not None:
            text += f"\n   Result: {turn.result.row_count} rows"
        lines.append(text)
    return "\n".join(lines)


def format_schema_context(
    schema: str, tables: Sequence[TableWithColumns], detailed: bool = True
) -> str:
    """
    Whole-schema summary.

    ``detailed`` is the analysis variant (totals, numbered tables, defaults);
    otherwise the compact overview used for question generation.
    """
    if not detailed:
        context = f"Schema: {schema}\n\nTables Overview:\n"
        for entry in tables:
            context += f"\n{schema}.{entry.table}:\n"
            for col in entry.columns:
                nullability = "NULL" if col.nullable else "NOT NULL"
                context += f"  - {col.name}: {format_column_type(col)} {nullability}\n"
        return context

    total_columns = sum(len(entry.columns) for entry in tables)
    context = f"Schema: {schema}\n\n"
    context += f"Total Tables: {len(tables)}\n"
    context += f"Total Columns: {total_columns}\n\n"
    context += "Detailed Table Information:\n"
    context += "=" * 80 + "\n\n"
    for idx, entry in enumerate(tables, start=1):
        context += f"{idx}. Table: {schema}.{entry.table} ({entry.table_type or 'BASE TABLE'})\n"
        context += f"   Columns ({len(entry.columns)}):\n"
        for col in entry.columns:
            context += f"   {format_column_line(col).lstrip()}\n"
        context += "\n"
    return context


# ============================================================================
# SQL generation
# ============================================================================


def build_sql_generation_prompt(
    schema: str,
    table: str,
    columns: Sequence[ColumnDescriptor],
    question: str,
    sample_rows: Sequence[dict[str, Any]] | None = None,
    sample_size: int = 3,
) -> PromptPair:
    """Single-table SQL generation with column details and sample rows."""
    sample_data = (
        to_json(list(sample_rows[:sample_size])) if sample_rows else "No sample data available"
    )
    return _render(
        "sql_generation",
        schema=schema,
        table=table,
        column_lines="\n".join(format_column_line(col) for col in columns),
        sample_size=sample_size,
        sample_data=sample_data,
        question=question,
    )


def build_joined_sql_prompt(
    schema: str | None,
    question: str,
    tables: Sequence[TableWithColumns],
    conversation: Sequence[ConversationTurn] = (),
) -> PromptPair:
    """Multi-table SQL generation with optional conversation history."""
    return _render(
        "joined_sql",
        schema=schema or "public",
        question=question,
        schema_info=format_joined_schema(tables),
        conversation_history=format_conversation(conversation),
    )


def build_table_identification_prompt(
    question: str,
    tables: Sequence[str],
    conversation: Sequence[ConversationTurn] = (),
) -> PromptPair:
    """Single user message asking for a JSON array of relevant table names."""
    return _render(
        "table_identification",
        system=False,
        question=question,
        tables=list(tables),
        conversation_history=format_conversation(conversation, "Identified tables"),
    )


# ============================================================================
# Evaluation and refinement
# ============================================================================


def build_sql_evaluation_prompt(
    question: str,
    sql: str,
    schema: str | None = None,
    tables: Sequence[TableWithColumns] = (),
    execution_success: bool = True,
    execution_error: str | None = None,
    result: QueryResult | None = None,
    sample_size: int = 3,
) -> PromptPair:
    result_context = None
    if result is not None:
        result_context = {
            "row_count": result.row_count,
            "columns": ", ".join(result.columns) or "N/A",
            "sample_json": to_json(result.rows[:sample_size]) if result.rows else None,
        }
    return _render(
        "sql_evaluation",
        question=question,
        sql=sql,
        schema_context=format_schema_listing(schema or "public", tables) if tables else "",
        execution_success=execution_success,
        execution_error=execution_error,
        result=result_context,
        sample_size=sample_size,
    )


def build_sql_refinement_prompt(
    question: str,
    original_sql: str,
    evaluation: SQLEvaluation,
    execution: ExecutionSummary | None = None,
    schema: str | None = None,
    tables: Sequence[TableWithColumns] = (),
    sample_size: int = 3,
) -> PromptPair:
    sample_json = None
    if execution is not None and execution.sample_rows:
        sample_json = to_json(execution.sample_rows[:sample_size])
    return _render(
        "sql_refinement",
        question=question,
        original_sql=original_sql,
        score_percent=evaluation.percent,
        evaluation=evaluation,
        execution=execution,
        sample_json=sample_json,
        sample_size=sample_size,
        schema_info=format_schema_listing(schema or "public", tables, nullability=True),
    )


# ============================================================================
# Results
# ============================================================================


def build_interpretation_prompt(
    question: str, sql: str, result: QueryResult, limit: int = 10
) -> PromptPair:
    return _render(
        "interpretation",
        question=question,
        sql=sql,
        row_count=result.row_count,
        rows_json=to_json(result.rows[:limit]),
        shown=limit,
    )


def build_chart_config_prompt(
    question: str,
    result: QueryResult,
    sql: str | None = None,
    interpretation: str | None = None,
    sample_size: int = 5,
) -> PromptPair:
    return _render(
        "chart_config",
        question=question,
        sql=sql,
        interpretation=interpretation,
        columns=result.columns,
        row_count=result.row_count,
        sample_json=to_json(result.rows[:sample_size]),
    )


# ============================================================================
# Schema exploration
# ============================================================================


def build_erd_layout_prompt(
    tables: Sequence[TableWithColumns], foreign_keys: Sequence[ForeignKey] = ()
) -> PromptPair:
    table_summary = "\n\n".join(
        f"{entry.table}:\n" + "\n".join(f"  - {c.name} ({c.data_type})" for c in entry.columns)
        for entry in tables
    )
    relationship_summary = "\n".join(
        f"{fk.from_table}.{fk.from_column} -> {fk.to_table}.{fk.to_column}" for fk in foreign_keys
    )
    return _render(
        "erd_layout",
        table_summary=table_summary,
        relationship_summary=relationship_summary,
    )


def build_schema_analysis_prompt(schema: str, tables: Sequence[TableWithColumns]) -> PromptPair:
    return _render("schema_analysis", schema_context=format_schema_context(schema, tables))


def build_question_generation_prompt(
    schema: str,
    tables: Sequence[TableWithColumns],
    schema_analysis: str | None = None,
) -> PromptPair:
    return _render(
        "question_generation",
        schema_context=format_schema_context(schema, tables, detailed=False),
        schema_analysis=schema_analysis,
    )


# ============================================================================
# Offline SQL-generation evaluation
# ============================================================================


def build_eval_generation_prompt(
    question: str, schema: str, tables: Sequence[TableWithColumns]
) -> PromptPair:
    loader = get_loader()
    return PromptPair(
        system=loader.render("evaluation/generate_system.md"),
        user=loader.render(
            "evaluation/generate_user.md",
            schema=schema,
            schema_context=format_schema_listing(schema, tables),
            question=question,
        ),
    )


def build_eval_judge_prompt(
    question: str, generated_sql: str, reference_sql: str, explanation: str
) -> PromptPair:
    loader = get_loader()
    return PromptPair(
        system=loader.render("evaluation/judge_system.md"),
        user=loader.render(
            "evaluation/judge_user.md",
            question=question,
            explanation=explanation,
            reference_sql=reference_sql,
            generated_sql=generated_sql,
        ),
    )
