"""
SQL Executor

Runs user or model SQL verbatim against the configured database. A statement
the database rejects is an ordinary outcome, not an exception.
"""

from __future__ import annotations

import logging

from ambient.connectors.base import QueryError
from ambient.database.introspector import SchemaIntrospector
from ambient.models.results import ExecutionOutcome

logger = logging.getLogger(__name__)


class SQLExecutor:
    """Execute SQL with a fresh connection per statement."""

    def __init__(self, introspector: SchemaIntrospector | None = None):
        self.introspector = introspector or SchemaIntrospector()

    async def execute(self, env: str | None, sql: str) -> ExecutionOutcome:
        """
        Run ``sql`` and return its rows or the driver's error message.

        Raises:
            MissingConfigurationError: If no connection URL is configured
            ConnectionError: If the database cannot be reached
        """
        async with self.introspector.connector(env) as connector:
            try:
                result = await connector.run(sql)
            except QueryError as e:
                logger.warning(f"SQL execution failed: {e}", extra={"env": env})
                return ExecutionOutcome(error=str(e))

        logger.info(
            f"SQL executed, {result.row_count} rows",
            extra={"env": env, "row_count": result.row_count},
        )
        return ExecutionOutcome(result=result)
