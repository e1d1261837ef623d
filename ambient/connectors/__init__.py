"""
Database Connectors Module

Async connectors for the database being explored.

Available Connectors:
    - BaseConnector: Abstract base class
    - PostgresConnector: PostgreSQL connector (asyncpg, one connection per unit of work)

Usage:
    from ambient.connectors import PostgresConnector

    async with PostgresConnector("postgresql://user:pw@localhost/shop") as connector:
        schemas = await connector.list_schemas()
        result = await connector.run("SELECT * FROM public.users LIMIT 5")
"""

from ambient.connectors.base import (
    BaseConnector,
    ConnectionError,
    ConnectorError,
    QueryError,
    SchemaError,
)
from ambient.connectors.postgres import PostgresConnector

__all__ = [
    "BaseConnector",
    "PostgresConnector",
    "ConnectorError",
    "ConnectionError",
    "QueryError",
    "SchemaError",
]
