"""
PostgreSQL Connector

Async PostgreSQL connector using asyncpg.

Features:
- One connection per connector, opened and closed around each unit of work
- Catalog introspection (schemas, tables, columns, foreign keys)
- Table sampling with quoted identifiers
- Verbatim execution of arbitrary SQL, keeping column names for empty results

Usage:
    async with PostgresConnector("postgresql://user:pw@localhost/shop") as connector:
        tables = await connector.list_tables("public")
        result = await connector.run("SELECT count(*) FROM public.orders")
"""

import logging
import re
from typing import Any

import asyncpg

from ambient.connectors.base import (
    BaseConnector,
    ConnectionError,
    QueryError,
    SchemaError,
)
from ambient.database.catalog_templates import get_catalog_templates, quote_identifier
from ambient.models.results import QueryResult, SampleData, to_json_row
from ambient.models.schema import ColumnDescriptor, ForeignKey, TableDescriptor

logger = logging.getLogger(__name__)

_TEMPLATES = get_catalog_templates("postgresql")
_STATUS_COUNT = re.compile(r"(\d+)\s*$")


def _affected_rows(status: str | None) -> int:
    """Row count from a command tag such as ``UPDATE 3`` or ``INSERT 0 5``."""
    if not status:
        return 0
    match = _STATUS_COUNT.search(status)
    return int(match.group(1)) if match else 0


class PostgresConnector(BaseConnector):
    """
    PostgreSQL database connector using asyncpg.

    Provides catalog introspection and raw SQL execution over a single
    asyncpg connection.
    """

    def __init__(self, dsn: str, timeout: int = 30, ssl: str | None = "prefer", **kwargs):
        super().__init__(dsn, timeout=timeout, **kwargs)
        self.ssl = ssl

    async def connect(self) -> None:
        """
        Open a connection to PostgreSQL.

        Raises:
            ConnectionError: If connection fails
        """
        if self._connected and self._conn is not None:
            logger.debug("Already connected, skipping connection")
            return

        try:
            logger.debug(f"Connecting to PostgreSQL at {self.host}/{self.database}")
            self._conn = await asyncpg.connect(
                dsn=self.dsn,
                timeout=self.timeout,
                ssl=self.ssl,
                **self.kwargs,
            )
            self._connected = True

        except asyncpg.PostgresError as e:
            logger.error(f"PostgreSQL connection failed: {e}")
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected error during connection: {e}")
            raise ConnectionError(f"Connection error: {e}") from e

    def _require_connection(self) -> asyncpg.Connection:
        if not self._connected or self._conn is None:
            raise ConnectionError("Not connected to database. Call connect() first.")
        return self._conn

    async def run(self, sql: str) -> QueryResult:
        """
        Execute SQL verbatim.

        Column names come from the prepared statement's attributes so they are
        present even when no rows come back. Statements that return no rows
        report the affected-row count from the command tag. Values with no
        JSON form, such as ``bytea`` or ranges, come back as strings.

        Raises:
            QueryError: If the statement fails
            ConnectionError: If not connected
        """
        conn = self._require_connection()

        try:
            try:
                statement = await conn.prepare(sql)
            except asyncpg.PostgresSyntaxError as e:
                if "multiple commands" not in str(e):
                    raise
                # Multi-statement scripts cannot be prepared, run them as a batch.
                status = await conn.execute(sql)
                return QueryResult(columns=[], rows=[], row_count=_affected_rows(status))

            attributes = statement.get_attributes()
            records = await statement.fetch()
            rows = [to_json_row(dict(record)) for record in records]
            columns = [attribute.name for attribute in attributes]

            if attributes:
                row_count = len(rows)
            else:
                row_count = _affected_rows(statement.get_statusmsg())

            logger.debug(
                "Query executed",
                extra={"row_count": row_count, "column_count": len(columns)},
            )
            return QueryResult(columns=columns, rows=rows, row_count=row_count)

        except asyncpg.PostgresError as e:
            logger.error(f"Query failed: {e}\nQuery: {sql[:200]}...")
            raise QueryError(str(e)) from e
        except Exception as e:
            logger.error(f"Unexpected error during query execution: {e}")
            raise QueryError(str(e) or "Failed to execute SQL") from e

    async def _fetch_catalog(self, query: str, *params: Any) -> list[asyncpg.Record]:
        conn = self._require_connection()
        try:
            return await conn.fetch(query, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Catalog query failed: {e}")
            raise SchemaError(f"Failed to introspect schema: {e}") from e

    async def list_schemas(self) -> list[str]:
        rows = await self._fetch_catalog(_TEMPLATES.list_schemas)
        return [row["schema_name"] for row in rows]

    async def list_tables(self, schema: str) -> list[TableDescriptor]:
        rows = await self._fetch_catalog(_TEMPLATES.list_tables, schema)
        return [TableDescriptor(name=row["table_name"], type=row["table_type"]) for row in rows]

    async def list_columns(self, schema: str, table: str) -> list[ColumnDescriptor]:
        rows = await self._fetch_catalog(_TEMPLATES.list_columns, schema, table)
        return [
            ColumnDescriptor(
                name=row["column_name"],
                type=row["data_type"],
                nullable=row["is_nullable"] == "YES",
                default=row["column_default"],
                max_length=row["character_maximum_length"],
            )
            for row in rows
        ]

    async def list_foreign_keys(self, schema: str) -> list[ForeignKey]:
        rows = await self._fetch_catalog(_TEMPLATES.list_foreign_keys, schema)
        return [
            ForeignKey(
                from_table=row["from_table"],
                from_column=row["from_column"],
                to_table=row["to_table"],
                to_column=row["to_column"],
                constraint_name=row["constraint_name"],
            )
            for row in rows
        ]

    async def sample_rows(self, schema: str, table: str, limit: int = 10) -> SampleData:
        """First rows of ``schema.table``. Identifiers are quoted, never interpolated raw."""
        query = _TEMPLATES.sample_rows.format(
            schema=quote_identifier(schema),
            table=quote_identifier(table),
            limit=int(limit),
        )
        try:
            result = await self.run(query)
        except QueryError as e:
            raise SchemaError(f"Failed to sample {schema}.{table}: {e}") from e
        return SampleData(columns=result.columns, rows=result.rows)

    async def close(self) -> None:
        """
        Close the connection.

        Safe to call multiple times.
        """
        if self._conn is None:
            logger.debug("No connection to close")
            return

        try:
            await self._conn.close()
        except Exception as e:
            logger.error(f"Error closing connection: {e}")
            raise ConnectionError(f"Failed to close connection: {e}") from e
        finally:
            self._conn = None
            self._connected = False
