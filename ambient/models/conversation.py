"""
Conversation Models

A ``Message`` is one conversational turn. Assistant messages are created per
user question and filled in as each pipeline step completes. Nothing here
outlives the session that created it.
"""

import json
import uuid
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import Field

from ambient.models.results import QueryResult, SQLEvaluation
from ambient.models.schema import CamelModel, TableWithColumns


class TurnResultSummary(CamelModel):
    """Compact view of a previous turn's result for prompt context."""

    row_count: int = 0
    preview: str | None = None


class ConversationTurn(CamelModel):
    """A previous turn as sent to table-identification and SQL prompts."""

    role: Literal["user", "assistant"]
    content: str = ""
    relevant_tables: list[str] | None = None
    sql: str | None = None
    result: TurnResultSummary | None = None


class Message(CamelModel):
    """One conversational turn, mutated in place as the pipeline progresses."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "assistant"]
    content: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    user_question: str | None = None
    relevant_tables: list[str] | None = None
    tables_with_columns: list[TableWithColumns] | None = None

    sql: str | None = None
    evaluation: SQLEvaluation | None = None
    result: QueryResult | None = None
    interpretation: str | None = None
    chart_config: dict[str, Any] | None = None

    refined_sql: str | None = Field(None, alias="refinedSQL")
    refined_evaluation: SQLEvaluation | None = None
    refined_result: QueryResult | None = None
    refined_chart_config: dict[str, Any] | None = None

    error: str | None = None

    def can_refine(self, threshold: float = 0.9) -> bool:
        """Whether the refine action is available for this message."""
        return (
            self.evaluation is not None
            and self.evaluation.score < threshold
            and bool(self.user_question)
            and bool(self.sql)
            and not self.refined_sql
        )

    def to_turn(self, preview_rows: int = 3) -> ConversationTurn:
        """Summarise this message for conversation context."""
        summary = None
        if self.result is not None:
            summary = TurnResultSummary(
                row_count=self.result.row_count,
                preview=json.dumps(self.result.rows[:preview_rows], default=str),
            )
        return ConversationTurn(
            role=self.role,
            content=self.content,
            relevant_tables=self.relevant_tables,
            sql=self.sql,
            result=summary,
        )
