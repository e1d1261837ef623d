"""
Catalog Routes

Read-only schema introspection: schemas, tables, columns, foreign keys and
sample rows. Each call opens and closes its own connection.
"""

import logging

from fastapi import APIRouter, status

from ambient.api.errors import ApiError
from ambient.connectors.base import ConnectorError
from ambient.database.introspector import SchemaIntrospector
from ambient.models.api import (
    ColumnsResponse,
    EnvRequest,
    ForeignKeysResponse,
    SchemaRequest,
    SchemasResponse,
    TableRequest,
    TablesResponse,
)
from ambient.models.results import SampleData

logger = logging.getLogger(__name__)

router = APIRouter()


def _introspector() -> SchemaIntrospector:
    from ambient.api.main import get_component

    return get_component("introspector")


def _bad_request(message: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, message)


def _failed(message: str, exc: Exception) -> ApiError:
    logger.error(f"{message}: {exc}")
    return ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


@router.post("/schemas", response_model=SchemasResponse)
async def list_schemas(payload: EnvRequest) -> SchemasResponse:
    """Non-system schemas of the environment's database."""
    if not payload.env:
        raise _bad_request("Environment is required")
    try:
        schemas = await _introspector().list_schemas(payload.env)
    except ConnectorError as e:
        raise _failed("Failed to fetch schemas", e) from e
    return SchemasResponse(schemas=schemas)


@router.post("/tables", response_model=TablesResponse)
async def list_tables(payload: SchemaRequest) -> TablesResponse:
    """Tables and views in a schema."""
    if not payload.env or not payload.schema_name:
        raise _bad_request("Environment and schema are required")
    try:
        tables = await _introspector().list_tables(payload.env, payload.schema_name)
    except ConnectorError as e:
        raise _failed("Failed to fetch tables", e) from e
    return TablesResponse(tables=tables)


@router.post("/columns", response_model=ColumnsResponse)
async def list_columns(payload: TableRequest) -> ColumnsResponse:
    """Columns of one table in ordinal order."""
    if not payload.env or not payload.schema_name or not payload.table:
        raise _bad_request("Environment, schema, and table are required")
    try:
        columns = await _introspector().list_columns(
            payload.env, payload.schema_name, payload.table
        )
    except ConnectorError as e:
        raise _failed("Failed to fetch columns", e) from e
    return ColumnsResponse(columns=columns)


@router.post("/foreign-keys", response_model=ForeignKeysResponse)
async def list_foreign_keys(payload: SchemaRequest) -> ForeignKeysResponse:
    """Foreign-key edges within a schema."""
    if not payload.env or not payload.schema_name:
        raise _bad_request("Environment and schema are required")
    try:
        foreign_keys = await _introspector().list_foreign_keys(payload.env, payload.schema_name)
    except ConnectorError as e:
        raise _failed("Failed to fetch foreign keys", e) from e
    return ForeignKeysResponse(foreign_keys=foreign_keys)


@router.post("/sample-data", response_model=SampleData)
async def sample_data(payload: TableRequest) -> SampleData:
    """First rows of a table."""
    if not payload.env or not payload.schema_name or not payload.table:
        raise _bad_request("Environment, schema, and table are required")
    try:
        return await _introspector().sample_rows(payload.env, payload.schema_name, payload.table)
    except ConnectorError as e:
        raise _failed("Failed to fetch sample data", e) from e
