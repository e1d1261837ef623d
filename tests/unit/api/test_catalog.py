"""Unit tests for the catalog routes."""

import pytest

from ambient.api.main import app_state
from ambient.config import MissingConfigurationError
from ambient.connectors.base import ConnectionError, SchemaError
from ambient.models.results import SampleData
from ambient.models.schema import ColumnDescriptor, ForeignKey, TableDescriptor


class TestSchemas:
    def test_lists_schemas(self, client, mock_introspector):
        mock_introspector.list_schemas.return_value = ["public", "sales"]

        response = client.post("/api/schemas", json={"env": "dev"})

        assert response.status_code == 200
        assert response.json() == {"schemas": ["public", "sales"]}
        mock_introspector.list_schemas.assert_awaited_once_with("dev")

    def test_env_required(self, client, mock_introspector):
        response = client.post("/api/schemas", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Environment is required"}

    def test_connection_failure(self, client, mock_introspector):
        mock_introspector.list_schemas.side_effect = ConnectionError("refused")

        response = client.post("/api/schemas", json={"env": "dev"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch schemas"}

    def test_missing_database_url(self, client, mock_introspector):
        mock_introspector.list_schemas.side_effect = MissingConfigurationError(
            "Database connection string not configured", setting="DATABASE_URL"
        )

        response = client.post("/api/schemas", json={"env": "dev"})

        assert response.status_code == 500
        assert response.json() == {"error": "Database connection string not configured"}

    def test_not_initialized(self, client, monkeypatch):
        monkeypatch.setitem(app_state, "introspector", None)

        response = client.post("/api/schemas", json={"env": "dev"})

        assert response.status_code == 503
        assert response.json() == {"error": "introspector is not initialized"}


class TestTables:
    def test_lists_tables(self, client, mock_introspector):
        mock_introspector.list_tables.return_value = [
            TableDescriptor(name="users"),
            TableDescriptor(name="active_users", type="VIEW"),
        ]

        response = client.post("/api/tables", json={"env": "dev", "schema": "public"})

        assert response.status_code == 200
        assert response.json()["tables"] == [
            {"name": "users", "type": "BASE TABLE"},
            {"name": "active_users", "type": "VIEW"},
        ]

    @pytest.mark.parametrize("body", [{"env": "dev"}, {"schema": "public"}])
    def test_env_and_schema_required(self, client, mock_introspector, body):
        response = client.post("/api/tables", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Environment and schema are required"}

    def test_failure(self, client, mock_introspector):
        mock_introspector.list_tables.side_effect = SchemaError("denied")

        response = client.post("/api/tables", json={"env": "dev", "schema": "public"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch tables"}


class TestColumns:
    def test_lists_columns_in_camel_case(self, client, mock_introspector):
        mock_introspector.list_columns.return_value = [
            ColumnDescriptor(name="email", type="character varying", max_length=255),
        ]

        response = client.post(
            "/api/columns", json={"env": "dev", "schema": "public", "table": "users"}
        )

        assert response.status_code == 200
        assert response.json()["columns"] == [
            {
                "name": "email",
                "type": "character varying",
                "nullable": False,
                "default": None,
                "maxLength": 255,
            }
        ]

    def test_table_required(self, client, mock_introspector):
        response = client.post("/api/columns", json={"env": "dev", "schema": "public"})

        assert response.status_code == 400
        assert response.json() == {"error": "Environment, schema, and table are required"}


class TestForeignKeysAndSamples:
    def test_foreign_keys(self, client, mock_introspector):
        mock_introspector.list_foreign_keys.return_value = [
            ForeignKey(
                from_table="orders",
                from_column="user_id",
                to_table="users",
                to_column="id",
                constraint_name="orders_user_id_fkey",
            )
        ]

        response = client.post("/api/foreign-keys", json={"env": "dev", "schema": "public"})

        assert response.status_code == 200
        assert response.json()["foreignKeys"][0] == {
            "fromTable": "orders",
            "fromColumn": "user_id",
            "toTable": "users",
            "toColumn": "id",
            "constraintName": "orders_user_id_fkey",
        }

    def test_sample_data(self, client, mock_introspector):
        mock_introspector.sample_rows.return_value = SampleData(
            columns=["id", "email"], rows=[{"id": 1, "email": "a@example.com"}]
        )

        response = client.post(
            "/api/sample-data", json={"env": "dev", "schema": "public", "table": "users"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "columns": ["id", "email"],
            "rows": [{"id": 1, "email": "a@example.com"}],
        }

    def test_sample_with_bytea_column(self, client, mock_introspector):
        mock_introspector.sample_rows.return_value = SampleData(
            columns=["id", "avatar"], rows=[{"id": 1, "avatar": b"\x89PNG"}]
        )

        response = client.post(
            "/api/sample-data", json={"env": "dev", "schema": "public", "table": "users"}
        )

        assert response.status_code == 200
        assert response.json()["rows"] == [{"id": 1, "avatar": "\\x89504e47"}]

    def test_sample_failure(self, client, mock_introspector):
        mock_introspector.sample_rows.side_effect = SchemaError("gone")

        response = client.post(
            "/api/sample-data", json={"env": "dev", "schema": "public", "table": "users"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch sample data"}
