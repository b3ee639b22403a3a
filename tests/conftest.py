"""Shared test fixtures for PostgreSQL MCP tests."""
import pytest
from unittest.mock import AsyncMock

from pgmcp.db import QueryResult
from pgmcp.governance.access import AccessLevel, AccessPolicy
from pgmcp.governance.masking import FieldDescriptor, MaskingPolicy
from pgmcp.governance.policy import QueryGuard


@pytest.fixture
def mock_pool():
    """Mock database connection pool."""
    mock = AsyncMock()
    mock.execute = AsyncMock(return_value=QueryResult())
    mock.query_metadata = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def masking_policy():
    return MaskingPolicy.build(
        hidden_tables=["secret_table"],
        hidden_columns=["internal_notes"],
        extra_sensitive_fields=["email"],
    )


@pytest.fixture
def readonly_guard(masking_policy):
    return QueryGuard(
        access=AccessPolicy.for_level(AccessLevel.READONLY),
        masking=masking_policy,
    )


@pytest.fixture
def user_fields():
    return [
        FieldDescriptor("id", 23),
        FieldDescriptor("name", 25),
        FieldDescriptor("email", 25),
        FieldDescriptor("password", 25),
        FieldDescriptor("internal_notes", 25),
    ]


@pytest.fixture
def user_rows():
    return [
        {
            "id": 1,
            "name": "Alice",
            "email": "alice@example.com",
            "password": "hunter2",
            "internal_notes": "vip",
        },
        {
            "id": 2,
            "name": "Bob",
            "email": None,
            "password": "correct horse",
            "internal_notes": None,
        },
    ]


@pytest.fixture
def sample_columns():
    return [
        {
            "table_schema": "public",
            "table_name": "users",
            "column_name": "id",
            "data_type": "integer",
            "is_nullable": "NO",
            "column_default": "nextval('users_id_seq')",
        },
        {
            "table_schema": "public",
            "table_name": "users",
            "column_name": "internal_notes",
            "data_type": "text",
            "is_nullable": "YES",
            "column_default": None,
        },
        {
            "table_schema": "public",
            "table_name": "secret_table",
            "column_name": "payload",
            "data_type": "text",
            "is_nullable": "YES",
            "column_default": None,
        },
        {
            "table_schema": "public",
            "table_name": "orders",
            "column_name": "total",
            "data_type": "numeric",
            "is_nullable": "NO",
            "column_default": None,
        },
    ]


@pytest.fixture
def sample_tables():
    return [
        {"table_schema": "public", "table_name": "users", "table_type": "BASE TABLE"},
        {"table_schema": "public", "table_name": "secret_table", "table_type": "BASE TABLE"},
        {"table_schema": "public", "table_name": "orders", "table_type": "BASE TABLE"},
    ]
