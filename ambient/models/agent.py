"""
Agent I/O Models

Pydantic models for agent inputs, outputs, and error handling.
Every LLM task has a typed input extending ``AgentInput`` and a typed output
extending ``AgentOutput``.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ambient.models.conversation import ConversationTurn
from ambient.models.results import (
    ERDLayout,
    ExecutionSummary,
    QueryResult,
    SQLEvaluation,
)
from ambient.models.schema import ForeignKey, TableWithColumns


class AgentMetadata(BaseModel):
    """Metadata about agent execution."""

    agent_name: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    duration_ms: float | None = None
    llm_calls: int = 0
    error: str | None = None

    model_config = ConfigDict(frozen=False)

    def mark_complete(self) -> None:
        """Mark execution as complete and calculate duration."""
        self.completed_at = datetime.now(UTC)
        if self.started_at:
            delta = self.completed_at - self.started_at
            self.duration_ms = delta.total_seconds() * 1000


class AgentInput(BaseModel):
    """
    Base input model for all agents.

    ``query`` is the user's natural-language question where the task has one.
    """

    query: str = Field(default="", description="User's natural language question")
    conversation: list[ConversationTurn] = Field(
        default_factory=list, description="Previous turns in the conversation"
    )


class AgentOutput(BaseModel):
    """Base output model for all agents."""

    success: bool = Field(default=True, description="Whether the agent executed successfully")
    metadata: AgentMetadata | None = Field(None, description="Execution metadata")


class AgentError(Exception):
    """
    Exception for agent execution errors.

    Attributes:
        agent: Name of the agent that raised the error
        message: Error description
        recoverable: Whether the caller can continue with other steps
        context: Additional context for debugging
    """

    def __init__(
        self,
        agent: str,
        message: str,
        recoverable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        self.agent = agent
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}
        super().__init__(f"[{agent}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/API responses."""
        return {
            "agent": self.agent,
            "message": self.message,
            "recoverable": self.recoverable,
            "context": self.context,
            "type": self.__class__.__name__,
        }


class LLMOutputError(AgentError):
    """Model output that could not be parsed and has no sensible default."""

    def __init__(self, agent: str, message: str, context: dict[str, Any] | None = None):
        super().__init__(agent, message, recoverable=False, context=context)


# ============================================================================
# Table identification
# ============================================================================


class TableIdentifierInput(AgentInput):
    """Question plus the list of candidate table names."""

    tables: list[str] = Field(..., description="Candidate table names")


class TableIdentifierOutput(AgentOutput):
    relevant_tables: list[str] = Field(default_factory=list)


# ============================================================================
# SQL generation / evaluation / refinement
# ============================================================================


class SQLGenerationInput(AgentInput):
    """
    Input for SQL generation.

    With ``joined=False`` exactly one table is expected and ``sample_rows`` may
    be supplied. With ``joined=True`` any number of tables plus conversation
    context are used.
    """

    schema_name: str | None = Field(None, description="Schema used to qualify table names")
    tables: list[TableWithColumns] = Field(..., min_length=1)
    sample_rows: list[dict[str, Any]] | None = None
    joined: bool = False


class SQLGenerationOutput(AgentOutput):
    sql: str


class SQLEvaluationInput(AgentInput):
    """Question, generated SQL and whatever is known about its execution."""

    sql: str
    schema_name: str | None = None
    tables: list[TableWithColumns] = Field(default_factory=list)
    execution_success: bool = True
    execution_error: str | None = None
    execution_result: QueryResult | None = None


class SQLEvaluationOutput(AgentOutput):
    evaluation: SQLEvaluation


class SQLRefinementInput(AgentInput):
    """Original SQL with its evaluation and execution summary."""

    original_sql: str
    evaluation: SQLEvaluation
    execution: ExecutionSummary | None = None
    schema_name: str | None = None
    tables: list[TableWithColumns] = Field(default_factory=list)


class SQLRefinementOutput(AgentOutput):
    refined_sql: str


# ============================================================================
# Results: interpretation and charts
# ============================================================================


class InterpretationInput(AgentInput):
    sql: str
    result: QueryResult


class InterpretationOutput(AgentOutput):
    interpretation: str


class ChartConfigInput(AgentInput):
    sql: str | None = None
    result: QueryResult
    interpretation: str | None = None


class ChartConfigOutput(AgentOutput):
    chart_config: dict[str, Any]


# ============================================================================
# Schema exploration
# ============================================================================


class SchemaAnalysisInput(AgentInput):
    schema_name: str
    tables: list[TableWithColumns]


class SchemaAnalysisOutput(AgentOutput):
    analysis: str


class QuestionGenerationInput(AgentInput):
    schema_name: str
    tables: list[TableWithColumns]
    schema_analysis: str | None = None


class QuestionGenerationOutput(AgentOutput):
    questions: list[str] = Field(default_factory=list)


class ERDLayoutInput(AgentInput):
    tables: list[TableWithColumns]
    foreign_keys: list[ForeignKey] = Field(default_factory=list)


class ERDLayoutOutput(AgentOutput):
    layout: ERDLayout
