"""
Ambient Analytics Models

Pydantic models shared across the application.

    Schema descriptors (ambient.models.schema):
        ColumnDescriptor, TableDescriptor, TableWithColumns, ForeignKey

    Results (ambient.models.results):
        QueryResult, SampleData, ExecutionOutcome, ExecutionSummary,
        SQLEvaluation, ERDLayout

    Conversation (ambient.models.conversation):
        Message, ConversationTurn

    Agent I/O (ambient.models.agent):
        AgentInput, AgentOutput, AgentMetadata, AgentError, LLMOutputError
"""

from ambient.models.agent import (
    AgentError,
    AgentInput,
    AgentMetadata,
    AgentOutput,
    LLMOutputError,
)
from ambient.models.conversation import ConversationTurn, Message, TurnResultSummary
from ambient.models.results import (
    ERDLayout,
    ExecutionOutcome,
    ExecutionSummary,
    Position,
    QueryResult,
    SampleData,
    SQLEvaluation,
    TableClassification,
)
from ambient.models.schema import (
    CamelModel,
    ColumnDescriptor,
    ForeignKey,
    TableDescriptor,
    TableWithColumns,
)

__all__ = [
    "AgentError",
    "AgentInput",
    "AgentMetadata",
    "AgentOutput",
    "LLMOutputError",
    "ConversationTurn",
    "Message",
    "TurnResultSummary",
    "ERDLayout",
    "ExecutionOutcome",
    "ExecutionSummary",
    "Position",
    "QueryResult",
    "SampleData",
    "SQLEvaluation",
    "TableClassification",
    "CamelModel",
    "ColumnDescriptor",
    "ForeignKey",
    "TableDescriptor",
    "TableWithColumns",
]
