"""
Result Models

Query results, execution outcomes, SQL evaluations and ERD layouts.
All ephemeral, owned by whoever requested them.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import Field, field_serializer

from ambient.models.schema import CamelModel

# Types pydantic already renders as JSON.
JSON_NATIVE_TYPES = (str, int, float, bool, Decimal, datetime, date, time, timedelta, UUID)


def to_json_value(value: Any) -> Any:
    """
    JSON-safe form of a database value.

    Bytes render the way Postgres prints ``bytea`` (``\\x`` plus hex). Ranges,
    geometric types and anything else without a JSON form fall back to ``str``.
    """
    if value is None or isinstance(value, JSON_NATIVE_TYPES):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "\\x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    if isinstance(value, dict):
        return {key: to_json_value(item) for key, item in value.items()}
    return str(value)


def to_json_row(row: dict[str, Any]) -> dict[str, Any]:
    return {column: to_json_value(value) for column, value in row.items()}


class QueryResult(CamelModel):
    """Rows returned by a SQL statement."""

    columns: list[str] = Field(default_factory=list, description="Column names")
    rows: list[dict[str, Any]] = Field(default_factory=list, description="Result rows")
    row_count: int = Field(default=0, ge=0, description="Rows returned or affected")

    @field_serializer("rows", when_used="json")
    def serialize_rows(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [to_json_row(row) for row in rows]


class SampleData(CamelModel):
    """First rows of a table."""

    columns: list[str] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)

    @field_serializer("rows", when_used="json")
    def serialize_rows(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [to_json_row(row) for row in rows]


class ExecutionOutcome(CamelModel):
    """Either a result set or the driver's error message, never both."""

    result: QueryResult | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.result is not None


class ExecutionSummary(CamelModel):
    """Execution context handed to the refiner prompt."""

    success: bool
    row_count: int | None = None
    sample_rows: list[dict[str, Any]] | None = None
    columns: list[str] | None = None
    error: str | None = None

    @classmethod
    def from_outcome(cls, outcome: ExecutionOutcome, sample_size: int = 3) -> "ExecutionSummary":
        if outcome.result is not None and outcome.error is None:
            return cls(
                success=True,
                row_count=outcome.result.row_count,
                sample_rows=outcome.result.rows[:sample_size],
                columns=outcome.result.columns,
            )
        return cls(success=False, error=outcome.error or "Unknown error")


class SQLEvaluation(CamelModel):
    """LLM-judged quality of a SQL query."""

    score: float = Field(default=0.0, ge=0.0, le=1.0, description="Quality score in [0, 1]")
    summary: str = Field(default="No summary provided")
    strengths: list[str] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)
    suggestions: str = Field(default="")

    @property
    def percent(self) -> int:
        return round(self.score * 100)


class TableClassification(CamelModel):
    """ERD role of a table."""

    table_name: str
    type: Literal["fact", "dimension", "bridge"]
    reasoning: str = ""


class Position(CamelModel):
    """Canvas coordinates of a table node."""

    x: float
    y: float


class ERDLayout(CamelModel):
    """Table classifications plus node positions for an ERD canvas."""

    classifications: list[TableClassification] = Field(default_factory=list)
    positions: dict[str, Position] = Field(default_factory=dict)
