"""
Schema Introspector

Read-only catalog access for the schema explorer. Every call opens its own
connection, runs its catalog query and closes the connection again, so
nothing is cached between calls.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from ambient.config import DatabaseSettings, MissingConfigurationError, get_settings
from ambient.connectors.base import BaseConnector
from ambient.connectors.postgres import PostgresConnector
from ambient.models.results import SampleData
from ambient.models.schema import (
    ColumnDescriptor,
    ForeignKey,
    TableDescriptor,
    TableWithColumns,
)

logger = logging.getLogger(__name__)

ConnectorFactory = Callable[[str], BaseConnector]


def resolve_database_url(env: str | None, settings: DatabaseSettings | None = None) -> str:
    """
    Map an environment identifier to a connection URL.

    Raises:
        MissingConfigurationError: If neither the environment map nor the
            default URL provide one.
    """
    settings = settings or get_settings().database
    url = settings.url_for(env)
    if not url:
        raise MissingConfigurationError(
            "Database connection string not configured", setting="DATABASE_URL"
        )
    if url.startswith("postgresql+asyncpg://"):
        return url.replace("postgresql+asyncpg://", "postgresql://", 1)
    return url


def default_connector_factory(settings: DatabaseSettings) -> ConnectorFactory:
    """Build Postgres connectors with the configured SSL mode and timeout."""

    def factory(dsn: str) -> BaseConnector:
        return PostgresConnector(dsn, timeout=settings.connect_timeout, ssl=settings.ssl)

    return factory


class SchemaIntrospector:
    """Catalog reads keyed by environment identifier."""

    def __init__(
        self,
        settings: DatabaseSettings | None = None,
        connector_factory: ConnectorFactory | None = None,
        sample_limit: int | None = None,
    ):
        self.settings = settings or get_settings().database
        self.connector_factory = connector_factory or default_connector_factory(self.settings)
        self.sample_limit = sample_limit or get_settings().pipeline.sample_rows_limit

    def connector(self, env: str | None) -> BaseConnector:
        """A fresh, unopened connector for ``env``."""
        return self.connector_factory(resolve_database_url(env, self.settings))

    async def list_schemas(self, env: str | None) -> list[str]:
        async with self.connector(env) as connector:
            schemas = await connector.list_schemas()
        logger.info(f"Found {len(schemas)} schemas", extra={"env": env})
        return schemas

    async def list_tables(self, env: str | None, schema: str) -> list[TableDescriptor]:
        async with self.connector(env) as connector:
            tables = await connector.list_tables(schema)
        logger.info(f"Found {len(tables)} tables in {schema}", extra={"env": env})
        return tables

    async def list_columns(self, env: str | None, schema: str, table: str) -> list[ColumnDescriptor]:
        async with self.connector(env) as connector:
            return await connector.list_columns(schema, table)

    async def list_foreign_keys(self, env: str | None, schema: str) -> list[ForeignKey]:
        async with self.connector(env) as connector:
            return await connector.list_foreign_keys(schema)

    async def sample_rows(
        self, env: str | None, schema: str, table: str, limit: int | None = None
    ) -> SampleData:
        async with self.connector(env) as connector:
            return await connector.sample_rows(schema, table, limit or self.sample_limit)

    async def describe_tables(
        self, env: str | None, schema: str, tables: list[str]
    ) -> list[TableWithColumns]:
        """
        Fetch columns for several tables concurrently.

        Waits for every table. Any failure propagates after all have finished.
        """
        columns = await asyncio.gather(
            *(self.list_columns(env, schema, table) for table in tables)
        )
        return [
            TableWithColumns(table=table, columns=table_columns)
            for table, table_columns in zip(tables, columns, strict=True)
        ]

    async def describe_schema(
        self, env: str | None, schema: str
    ) -> tuple[list[TableWithColumns], list[ForeignKey]]:
        """Every table in ``schema`` with its columns, plus the foreign keys."""
        tables = await self.list_tables(env, schema)
        described, foreign_keys = await asyncio.gather(
            self.describe_tables(env, schema, [t.name for t in tables]),
            self.list_foreign_keys(env, schema),
        )
        for entry, table in zip(described, tables, strict=True):
            entry.table_type = table.table_type
        return described, foreign_keys
