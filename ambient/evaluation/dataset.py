"""
SQL Generation Evaluation Dataset

Reference questions with the SQL a careful analyst would write for them.
Table context is stored as a JSON string so LangSmith shows it verbatim.
"""

import json

DEFAULT_DATASET_NAME = "SQL Generation Evaluation Dataset"
DATASET_DESCRIPTION = "Test cases for evaluating SQL generation from natural language queries."


def _tables(*tables: tuple[str, list[tuple[str, str]]]) -> str:
    return json.dumps(
        [
            {"table": name, "columns": [{"name": col, "type": typ} for col, typ in columns]}
            for name, columns in tables
        ]
    )


SQL_EXAMPLES: list[dict[str, dict[str, str]]] = [
    {
        "inputs": {
            "question": "Show me all users who signed up in the last 30 days",
            "schema": "public",
            "tables": _tables(
                (
                    "users",
                    [
                        ("id", "integer"),
                        ("email", "varchar"),
                        ("created_at", "timestamp"),
                        ("name", "varchar"),
                    ],
                ),
            ),
        },
        "outputs": {
            "sql": "SELECT * FROM public.users WHERE created_at >= NOW() - INTERVAL '30 days'",
            "explanation": "Should filter users by created_at date within last 30 days",
        },
    },
    {
        "inputs": {
            "question": "Get the total number of orders per customer",
            "schema": "public",
            "tables": _tables(
                (
                    "orders",
                    [
                        ("id", "integer"),
                        ("customer_id", "integer"),
                        ("total", "decimal"),
                        ("created_at", "timestamp"),
                    ],
                ),
                ("customers", [("id", "integer"), ("name", "varchar"), ("email", "varchar")]),
            ),
        },
        "outputs": {
            "sql": (
                "SELECT c.name, COUNT(o.id) as order_count FROM public.customers c "
                "LEFT JOIN public.orders o ON c.id = o.customer_id GROUP BY c.id, c.name"
            ),
            "explanation": (
                "Should join customers with orders, count orders per customer, "
                "and use LEFT JOIN to include customers with zero orders"
            ),
        },
    },
    {
        "inputs": {
            "question": "Find the top 5 products by revenue in the last quarter",
            "schema": "public",
            "tables": _tables(
                (
                    "order_items",
                    [
                        ("id", "integer"),
                        ("order_id", "integer"),
                        ("product_id", "integer"),
                        ("quantity", "integer"),
                        ("price", "decimal"),
                    ],
                ),
                ("products", [("id", "integer"), ("name", "varchar"), ("category", "varchar")]),
                ("orders", [("id", "integer"), ("created_at", "timestamp")]),
            ),
        },
        "outputs": {
            "sql": (
                "SELECT p.name, SUM(oi.quantity * oi.price) as revenue FROM public.products p "
                "JOIN public.order_items oi ON p.id = oi.product_id "
                "JOIN public.orders o ON oi.order_id = o.id "
                "WHERE o.created_at >= DATE_TRUNC('quarter', NOW()) - INTERVAL '3 months' "
                "AND o.created_at < DATE_TRUNC('quarter', NOW()) "
                "GROUP BY p.id, p.name ORDER BY revenue DESC LIMIT 5"
            ),
            "explanation": (
                "Should calculate revenue per product, filter by last quarter, and return top 5"
            ),
        },
    },
    {
        "inputs": {
            "question": "List all products that have never been ordered",
            "schema": "public",
            "tables": _tables(
                ("products", [("id", "integer"), ("name", "varchar"), ("price", "decimal")]),
                (
                    "order_items",
                    [("id", "integer"), ("product_id", "integer"), ("quantity", "integer")],
                ),
            ),
        },
        "outputs": {
            "sql": (
                "SELECT p.* FROM public.products p "
                "LEFT JOIN public.order_items oi ON p.id = oi.product_id WHERE oi.id IS NULL"
            ),
            "explanation": "Should use LEFT JOIN and filter for NULL to find products with no orders",
        },
    },
    {
        "inputs": {
            "question": "Calculate the average order value by month for 2024",
            "schema": "public",
            "tables": _tables(
                ("orders", [("id", "integer"), ("total", "decimal"), ("created_at", "timestamp")]),
            ),
        },
        "outputs": {
            "sql": (
                "SELECT DATE_TRUNC('month', created_at) as month, AVG(total) as avg_order_value "
                "FROM public.orders WHERE EXTRACT(YEAR FROM created_at) = 2024 "
                "GROUP BY DATE_TRUNC('month', created_at) ORDER BY month"
            ),
            "explanation": "Should group by month, calculate average, and filter for 2024",
        },
    },
]
