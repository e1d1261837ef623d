"""
Insight Routes

Result interpretation, chart configuration, ERD layout, schema analysis and
example-question generation.
"""

import logging

from fastapi import APIRouter, status

from ambient.api.errors import ApiError
from ambient.models.agent import (
    AgentError,
    ChartConfigInput,
    ERDLayoutInput,
    InterpretationInput,
    LLMOutputError,
    QuestionGenerationInput,
    SchemaAnalysisInput,
)
from ambient.models.api import (
    AnalyzeSchemaRequest,
    ChartConfigRequest,
    ChartConfigResponse,
    ERDLayoutRequest,
    ERDLayoutResponse,
    GenerateQuestionsRequest,
    InterpretationResponse,
    InterpretResultsRequest,
    QuestionsResponse,
    SchemaAnalysisResponse,
)
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


@router.post("/interpret-results", response_model=InterpretationResponse)
async def interpret_results(payload: InterpretResultsRequest) -> InterpretationResponse:
    """Plain-language explanation of a query result."""
    if not payload.natural_language_query or not payload.sql or payload.result is None:
        raise _bad_request("Natural language query, SQL, and result are required")
    try:
        output = await _pipeline().interpreter(
            InterpretationInput(
                query=payload.natural_language_query,
                conversation=payload.conversation_context,
                sql=payload.sql,
                result=payload.result,
            )
        )
    except AgentError as e:
        raise _failed("Failed to generate interpretation", e) from e
    return InterpretationResponse(interpretation=output.interpretation)


@router.post("/generate-chart-config", response_model=ChartConfigResponse)
async def generate_chart_config(payload: ChartConfigRequest) -> ChartConfigResponse:
    """Chart.js configuration for a result."""
    if not payload.natural_language_query or payload.result is None:
        raise _bad_request("Natural language query and result are required")
    try:
        output = await _pipeline().chart_generator(
            ChartConfigInput(
                query=payload.natural_language_query,
                sql=payload.sql,
                result=payload.result,
                interpretation=payload.interpretation,
            )
        )
    except LLMOutputError as e:
        raise _failed("Failed to parse chart configuration", e) from e
    except AgentError as e:
        raise _failed("Failed to generate chart configuration", e) from e
    return ChartConfigResponse(chart_config=output.chart_config)


@router.post("/optimize-erd-layout", response_model=ERDLayoutResponse)
async def optimize_erd_layout(payload: ERDLayoutRequest) -> ERDLayoutResponse:
    """Fact/dimension/bridge classification and node positions for the ERD."""
    if payload.tables_with_columns is None:
        raise _bad_request("Tables with columns are required")
    try:
        output = await _pipeline().erd_layout(
            ERDLayoutInput(tables=payload.tables_with_columns, foreign_keys=payload.foreign_keys)
        )
    except AgentError as e:
        raise _failed("Failed to optimize layout", e) from e
    return ERDLayoutResponse(layout=output.layout)


@router.post("/analyze-schema", response_model=SchemaAnalysisResponse)
async def analyze_schema(payload: AnalyzeSchemaRequest) -> SchemaAnalysisResponse:
    """Markdown analysis of a schema's business domain and analytics potential."""
    if not payload.env or not payload.schema_name or payload.tables_with_columns is None:
        raise _bad_request("Environment, schema, and tablesWithColumns are required")
    try:
        output = await _pipeline().schema_analyst(
            SchemaAnalysisInput(
                schema_name=payload.schema_name, tables=payload.tables_with_columns
            )
        )
    except AgentError as e:
        raise _failed("Failed to analyze schema", e) from e
    return SchemaAnalysisResponse(analysis=output.analysis)


@router.post("/generate-questions", response_model=QuestionsResponse)
async def generate_questions(payload: GenerateQuestionsRequest) -> QuestionsResponse:
    """Example business questions the schema can answer."""
    if not payload.env or not payload.schema_name or payload.tables_with_columns is None:
        raise _bad_request("Environment, schema, and tablesWithColumns are required")
    try:
        output = await _pipeline().question_generator(
            QuestionGenerationInput(
                schema_name=payload.schema_name,
                tables=payload.tables_with_columns,
                schema_analysis=payload.schema_analysis,
            )
        )
    except AgentError as e:
        raise _failed("Failed to generate questions", e) from e
    return QuestionsResponse(questions=output.questions)
