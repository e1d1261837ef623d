"""
Base Database Connector

Abstract base class for database connectors. Provides a consistent async
interface for opening a connection, running SQL and reading the catalog.

All connectors must implement:
- connect(): Open a single connection
- run(): Execute a SQL string verbatim
- list_schemas() / list_tables() / list_columns() / list_foreign_keys()
- sample_rows(): First rows of a table
- close(): Release the connection
"""

import logging
from abc import ABC, abstractmethod
from urllib.parse import urlparse

from ambient.models.results import QueryResult, SampleData
from ambient.models.schema import ColumnDescriptor, ForeignKey, TableDescriptor

logger = logging.getLogger(__name__)


class ConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class ConnectionError(ConnectorError):
    """Error establishing or managing database connection."""

    pass


class QueryError(ConnectorError):
    """Error executing database query."""

    pass


class SchemaError(ConnectorError):
    """Error introspecting database schema."""

    pass


class BaseConnector(ABC):
    """
    Abstract base class for database connectors.

    A connector owns exactly one connection for its lifetime. Callers open it,
    do one unit of work and close it again, usually with ``async with``:

        async with PostgresConnector(dsn) as connector:
            columns = await connector.list_columns("public", "users")
    """

    def __init__(self, dsn: str, timeout: int = 30, **kwargs):
        """
        Initialize connector.

        Args:
            dsn: Connection URL
            timeout: Connection timeout in seconds
            **kwargs: Additional driver-specific parameters
        """
        self.dsn = dsn
        self.timeout = timeout
        self.kwargs = kwargs

        parsed = urlparse(dsn)
        self.host = parsed.hostname or "localhost"
        self.port = parsed.port
        self.database = parsed.path.lstrip("/") if parsed.path else ""
        self.user = parsed.username or ""

        self._conn = None
        self._connected = False

    @abstractmethod
    async def connect(self) -> None:
        """
        Open the connection. Idempotent.

        Raises:
            ConnectionError: If connection fails
        """
        pass

    @abstractmethod
    async def run(self, sql: str) -> QueryResult:
        """
        Execute a SQL string exactly as given.

        Raises:
            QueryError: If the database rejects the statement
            ConnectionError: If not connected
        """
        pass

    @abstractmethod
    async def list_schemas(self) -> list[str]:
        """Non-system schema names."""
        pass

    @abstractmethod
    async def list_tables(self, schema: str) -> list[TableDescriptor]:
        """Tables and views in a schema."""
        pass

    @abstractmethod
    async def list_columns(self, schema: str, table: str) -> list[ColumnDescriptor]:
        """Columns of a table in ordinal order."""
        pass

    @abstractmethod
    async def list_foreign_keys(self, schema: str) -> list[ForeignKey]:
        """Foreign-key edges within a schema."""
        pass

    @abstractmethod
    async def sample_rows(self, schema: str, table: str, limit: int = 10) -> SampleData:
        """First ``limit`` rows of a table."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Safe to call multiple times."""
        pass

    @property
    def is_connected(self) -> bool:
        """Check if connector is connected."""
        return self._connected

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
        return False

    def __repr__(self) -> str:
        """String representation (never includes the password)."""
        status = "connected" if self._connected else "disconnected"
        port = f":{self.port}" if self.port else ""
        return (
            f"<{self.__class__.__name__} {self.user}@{self.host}{port}/{self.database} ({status})>"
        )
