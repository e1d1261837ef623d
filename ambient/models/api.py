"""
API Request/Response Models

Pydantic models for FastAPI endpoints. Request fields are optional at the
model level. Each route checks its own required fields so it can answer with
a route-specific 400 message.
"""

from typing import Any

from pydantic import Field

from ambient.models.conversation import ConversationTurn
from ambient.models.results import (
    ERDLayout,
    ExecutionSummary,
    QueryResult,
    SampleData,
    SQLEvaluation,
)
from ambient.models.schema import (
    CamelModel,
    ColumnDescriptor,
    ForeignKey,
    TableDescriptor,
    TableWithColumns,
)

# ============================================================================
# Requests
# ============================================================================


class EnvRequest(CamelModel):
    env: str | None = Field(None, description="Environment identifier")


class SchemaRequest(EnvRequest):
    schema_name: str | None = Field(None, alias="schema", description="Schema name")


class TableRequest(SchemaRequest):
    table: str | None = Field(None, description="Table name")


class ExecuteSQLRequest(EnvRequest):
    sql: str | None = Field(None, description="SQL to run verbatim")


class GenerateSQLRequest(TableRequest):
    natural_language_query: str | None = None
    columns: list[ColumnDescriptor] = Field(default_factory=list)
    sample_data: SampleData | None = None


class GenerateJoinedSQLRequest(SchemaRequest):
    query: str | None = None
    tables_with_columns: list[TableWithColumns] | None = None
    conversation_context: list[ConversationTurn] = Field(default_factory=list)


class IdentifyTablesRequest(CamelModel):
    query: str | None = None
    tables: list[str] | None = None
    conversation_context: list[ConversationTurn] = Field(default_factory=list)


class EvaluateSQLQueryRequest(CamelModel):
    question: str | None = None
    generated_sql: str | None = Field(None, alias="generatedSQL")
    schema_name: str | None = Field(None, alias="schema")
    tables: list[TableWithColumns] = Field(default_factory=list)
    execution_success: bool = True
    execution_error: str | None = None
    execution_result: QueryResult | None = None


class RefineSQLRequest(CamelModel):
    question: str | None = None
    original_sql: str | None = Field(None, alias="originalSQL")
    evaluation: SQLEvaluation | None = None
    execution_result: ExecutionSummary | None = None
    schema_name: str | None = Field(None, alias="schema")
    schema_context: list[TableWithColumns] = Field(default_factory=list)


class InterpretResultsRequest(CamelModel):
    natural_language_query: str | None = None
    sql: str | None = None
    result: QueryResult | None = None
    conversation_context: list[ConversationTurn] = Field(default_factory=list)


class ChartConfigRequest(CamelModel):
    natural_language_query: str | None = None
    sql: str | None = None
    result: QueryResult | None = None
    interpretation: str | None = None


class ERDLayoutRequest(CamelModel):
    tables_with_columns: list[TableWithColumns] | None = None
    foreign_keys: list[ForeignKey] = Field(default_factory=list)


class AnalyzeSchemaRequest(SchemaRequest):
    tables_with_columns: list[TableWithColumns] | None = None


class GenerateQuestionsRequest(AnalyzeSchemaRequest):
    schema_analysis: str | None = None


class EvaluateSQLGenerationRequest(CamelModel):
    dataset_name: str = "SQL Generation Evaluation Dataset"
    experiment_prefix: str = "sql-eval"


# ============================================================================
# Responses
# ============================================================================


class SchemasResponse(CamelModel):
    schemas: list[str]


class TablesResponse(CamelModel):
    tables: list[TableDescriptor]


class ColumnsResponse(CamelModel):
    columns: list[ColumnDescriptor]


class ForeignKeysResponse(CamelModel):
    foreign_keys: list[ForeignKey]


class SQLResponse(CamelModel):
    sql: str


class RelevantTablesResponse(CamelModel):
    relevant_tables: list[str]


class EvaluateSQLQueryResponse(CamelModel):
    success: bool = True
    evaluation: SQLEvaluation


class RefineSQLResponse(CamelModel):
    success: bool = True
    refined_sql: str = Field(..., alias="refinedSQL")


class InterpretationResponse(CamelModel):
    interpretation: str


class ChartConfigResponse(CamelModel):
    chart_config: dict[str, Any]


class ERDLayoutResponse(CamelModel):
    layout: ERDLayout


class SchemaAnalysisResponse(CamelModel):
    analysis: str


class QuestionsResponse(CamelModel):
    questions: list[str]


class EvaluationRunResponse(CamelModel):
    success: bool = True
    message: str
    dataset_id: str
    dataset_name: str
    results: dict[str, Any] = Field(default_factory=dict)


class StatusResponse(CamelModel):
    status: str = "ready"
    description: str | None = None
    configuration: dict[str, Any] | None = None


class HealthResponse(CamelModel):
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="ISO-8601 timestamp")


class ReadinessResponse(HealthResponse):
    checks: dict[str, bool] = Field(default_factory=dict)
