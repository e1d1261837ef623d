"""
SQL Routes

Execution, generation (single table and joined), table identification,
evaluation and refinement of SQL.
"""

import logging

from fastapi import APIRouter, status

from ambient.api.errors import ApiError
from ambient.connectors.base import ConnectorError
from ambient.models.agent import (
    AgentError,
    SQLEvaluationInput,
    SQLGenerationInput,
    SQLRefinementInput,
    TableIdentifierInput,
)
from ambient.models.api import (
    EvaluateSQLQueryRequest,
    EvaluateSQLQueryResponse,
    ExecuteSQLRequest,
    GenerateJoinedSQLRequest,
    GenerateSQLRequest,
    IdentifyTablesRequest,
    RefineSQLRequest,
    RefineSQLResponse,
    RelevantTablesResponse,
    SQLResponse,
    StatusResponse,
)
from ambient.models.results import ExecutionOutcome
from ambient.models.schema import TableWithColumns
from ambient.pipeline import AnalyticsPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


def _pipeline() -> AnalyticsPipeline:
    from ambient.api.main import get_component

    return get_component("pipeline")


def _bad_request(message: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, message)


def _failed(message: str, exc: Exception) -> ApiError:
    logger.error(f"{message}: {exc}")
    return ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


@router.post("/execute-sql", response_model=ExecutionOutcome)
async def execute_sql(payload: ExecuteSQLRequest) -> ExecutionOutcome:
    """
    Run SQL verbatim.

    Database errors come back as ``{"result": null, "error": "..."}`` with
    status 200. Only connection failures are HTTP errors.
    """
    if not payload.env or not payload.sql:
        raise _bad_request("Environment and SQL are required")
    try:
        return await _pipeline().executor.execute(payload.env, payload.sql)
    except ConnectorError as e:
        raise _failed("Failed to execute SQL", e) from e


@router.post("/generate-sql", response_model=SQLResponse)
async def generate_sql(payload: GenerateSQLRequest) -> SQLResponse:
    """SQL for a question about a single table."""
    if (
        not payload.env
        or not payload.schema_name
        or not payload.table
        or not payload.natural_language_query
    ):
        raise _bad_request("Environment, schema, table, and natural language query are required")
    try:
        output = await _pipeline().sql(
            SQLGenerationInput(
                query=payload.natural_language_query,
                schema_name=payload.schema_name,
                tables=[TableWithColumns(table=payload.table, columns=payload.columns)],
                sample_rows=payload.sample_data.rows if payload.sample_data else None,
            )
        )
    except AgentError as e:
        raise _failed("Failed to generate SQL", e) from e
    return SQLResponse(sql=output.sql)


@router.post("/generate-joined-sql", response_model=SQLResponse)
async def generate_joined_sql(payload: GenerateJoinedSQLRequest) -> SQLResponse:
    """SQL that may join several tables, with conversation context."""
    if not payload.query or payload.tables_with_columns is None:
        raise _bad_request("Query and tablesWithColumns array are required")
    if not payload.tables_with_columns:
        raise _failed("Failed to generate SQL query", ValueError("no tables supplied"))
    try:
        output = await _pipeline().sql(
            SQLGenerationInput(
                query=payload.query,
                conversation=payload.conversation_context,
                schema_name=payload.schema_name,
                tables=payload.tables_with_columns,
                joined=True,
            )
        )
    except AgentError as e:
        raise _failed("Failed to generate SQL query", e) from e
    return SQLResponse(sql=output.sql)


@router.post("/identify-relevant-tables", response_model=RelevantTablesResponse)
async def identify_relevant_tables(payload: IdentifyTablesRequest) -> RelevantTablesResponse:
    """The subset of ``tables`` needed to answer the question."""
    if not payload.query or payload.tables is None:
        raise _bad_request("Query and tables array are required")
    try:
        output = await _pipeline().table_identifier(
            TableIdentifierInput(
                query=payload.query,
                tables=payload.tables,
                conversation=payload.conversation_context,
            )
        )
    except AgentError as e:
        raise _failed("Failed to identify relevant tables", e) from e
    return RelevantTablesResponse(relevant_tables=output.relevant_tables)


@router.post("/evaluate-sql-query", response_model=EvaluateSQLQueryResponse)
async def evaluate_sql_query(payload: EvaluateSQLQueryRequest) -> EvaluateSQLQueryResponse:
    """Score a generated query. Unparseable model output scores 0."""
    if not payload.question or not payload.generated_sql:
        raise _bad_request("Question and generated SQL are required")
    try:
        output = await _pipeline().evaluator(
            SQLEvaluationInput(
                query=payload.question,
                sql=payload.generated_sql,
                schema_name=payload.schema_name,
                tables=payload.tables,
                execution_success=payload.execution_success,
                execution_error=payload.execution_error,
                execution_result=payload.execution_result,
            )
        )
    except AgentError as e:
        logger.error(f"Error evaluating SQL: {e}")
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message) from e
    return EvaluateSQLQueryResponse(evaluation=output.evaluation)


@router.get("/evaluate-sql-query", response_model=StatusResponse)
async def evaluate_sql_query_status() -> StatusResponse:
    return StatusResponse(
        description="Single SQL query evaluation endpoint - provides real-time quality feedback"
    )


@router.post("/refine-sql", response_model=RefineSQLResponse)
async def refine_sql(payload: RefineSQLRequest) -> RefineSQLResponse:
    """Rewrite a query using its evaluation and execution feedback."""
    if not payload.question or not payload.original_sql or payload.evaluation is None:
        raise _bad_request("Question, original SQL, and evaluation are required")
    try:
        output = await _pipeline().refiner(
            SQLRefinementInput(
                query=payload.question,
                original_sql=payload.original_sql,
                evaluation=payload.evaluation,
                execution=payload.execution_result,
                schema_name=payload.schema_name,
                tables=payload.schema_context,
            )
        )
    except AgentError as e:
        logger.error(f"Error refining SQL: {e}")
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message) from e
    return RefineSQLResponse(refined_sql=output.refined_sql)


@router.get("/refine-sql", response_model=StatusResponse)
async def refine_sql_status() -> StatusResponse:
    return StatusResponse(
        description=(
            "SQL refinement endpoint - improves SQL based on evaluation feedback "
            "and execution results"
        )
    )
