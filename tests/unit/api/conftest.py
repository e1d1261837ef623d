"""Shared fixtures for API route tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from ambient.api.main import app, app_state


@pytest.fixture
def client():
    """Test client without lifespan; components come from app_state patches."""
    return TestClient(app)


@pytest.fixture
def mock_pipeline(monkeypatch):
    """Pipeline whose agents and executor are AsyncMocks."""
    pipeline = MagicMock()
    for name in (
        "table_identifier",
        "sql",
        "evaluator",
        "refiner",
        "interpreter",
        "chart_generator",
        "schema_analyst",
        "question_generator",
        "erd_layout",
    ):
        setattr(pipeline, name, AsyncMock())
    pipeline.executor.execute = AsyncMock()
    monkeypatch.setitem(app_state, "pipeline", pipeline)
    return pipeline


@pytest.fixture
def mock_introspector(monkeypatch):
    introspector = MagicMock()
    for name in ("list_schemas", "list_tables", "list_columns", "list_foreign_keys", "sample_rows"):
        setattr(introspector, name, AsyncMock())
    monkeypatch.setitem(app_state, "introspector", introspector)
    return introspector


@pytest.fixture
def users_payload():
    return {
        "table": "users",
        "columns": [
            {"name": "id", "type": "integer", "nullable": False},
            {"name": "email", "type": "character varying", "maxLength": 255},
            {"name": "created_at", "type": "timestamp without time zone", "nullable": True},
        ],
    }
