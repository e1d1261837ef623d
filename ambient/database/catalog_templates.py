"""Catalog query templates for schema introspection."""

from __future__ import annotations

from typing import NamedTuple


class CatalogTemplates(NamedTuple):
    """System-catalog templates for metadata discovery.

    Parameterised templates use ``$n`` placeholders. ``sample_rows`` is
    formatted with already-quoted identifiers.
    """

    list_schemas: str
    list_tables: str
    list_columns: str
    list_foreign_keys: str
    sample_rows: str


_CATALOG_TEMPLATES: dict[str, CatalogTemplates] = {
    "postgresql": CatalogTemplates(
        list_schemas=(
            "SELECT schema_name "
            "FROM information_schema.schemata "
            "WHERE schema_name NOT IN ('information_schema', 'pg_catalog', 'pg_toast') "
            "AND schema_name NOT LIKE 'pg_%' "
            "ORDER BY schema_name"
        ),
        list_tables=(
            "SELECT table_name, table_type "
            "FROM information_schema.tables "
            "WHERE table_schema = $1 "
            "ORDER BY table_name"
        ),
        list_columns=(
            "SELECT column_name, data_type, is_nullable, column_default, "
            "character_maximum_length "
            "FROM information_schema.columns "
            "WHERE table_schema = $1 AND table_name = $2 "
            "ORDER BY ordinal_position"
        ),
        list_foreign_keys=(
            "SELECT "
            "tc.table_name AS from_table, "
            "kcu.column_name AS from_column, "
            "ccu.table_name AS to_table, "
            "ccu.column_name AS to_column, "
            "tc.constraint_name "
            "FROM information_schema.table_constraints AS tc "
            "JOIN information_schema.key_column_usage AS kcu "
            "ON tc.constraint_name = kcu.constraint_name "
            "AND tc.table_schema = kcu.table_schema "
            "JOIN information_schema.constraint_column_usage AS ccu "
            "ON ccu.constraint_name = tc.constraint_name "
            "AND ccu.table_schema = tc.table_schema "
            "WHERE tc.constraint_type = 'FOREIGN KEY' "
            "AND tc.table_schema = $1 "
            "ORDER BY tc.table_name, kcu.ordinal_position"
        ),
        sample_rows="SELECT * FROM {schema}.{table} LIMIT {limit}",
    ),
}


def get_catalog_templates(db_type: str) -> CatalogTemplates | None:
    """Return catalog templates for a database type."""
    return _CATALOG_TEMPLATES.get(db_type.lower())


def quote_identifier(name: str) -> str:
    """Quote a Postgres identifier, doubling embedded quotes."""
    return '"' + name.replace('"', '""') + '"'
