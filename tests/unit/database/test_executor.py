"""Unit tests for SQLExecutor."""

import pytest

from ambient.connectors.base import ConnectionError, QueryError
from ambient.database.executor import SQLExecutor
from ambient.models.results import QueryResult


@pytest.fixture
def executor(introspector):
    return SQLExecutor(introspector)


async def test_successful_query_returns_result(executor, mock_connector):
    mock_connector.run.return_value = QueryResult(columns=["n"], rows=[{"n": 1}], row_count=1)

    outcome = await executor.execute("dev", "SELECT 1 AS n")

    assert outcome.succeeded
    assert outcome.result.rows == [{"n": 1}]
    assert outcome.error is None
    mock_connector.run.assert_awaited_once_with("SELECT 1 AS n")


async def test_database_error_is_returned_not_raised(executor, mock_connector):
    mock_connector.run.side_effect = QueryError("division by zero")

    outcome = await executor.execute("dev", "SELECT 1/0")

    assert outcome.error == "division by zero"
    assert outcome.result is None
    assert not outcome.succeeded
    mock_connector.__aexit__.assert_awaited_once()


async def test_sql_is_passed_verbatim(executor, mock_connector):
    mock_connector.run.return_value = QueryResult()
    sql = "  select *\nfrom public.users ;  "

    await executor.execute("dev", sql)

    mock_connector.run.assert_awaited_once_with(sql)


async def test_connection_failure_propagates(executor, mock_connector):
    mock_connector.__aenter__.side_effect = ConnectionError("unreachable")

    with pytest.raises(ConnectionError):
        await executor.execute("dev", "SELECT 1")
