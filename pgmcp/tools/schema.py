"""Schema and table discovery tools with visibility filtering."""
from mcp.server.fastmcp import FastMCP

from pgmcp.db import MetadataKind, PostgresPool
from pgmcp.governance.masking import HiddenTable
from pgmcp.governance.policy import QueryGuard
from pgmcp.tools.requests import GetSchemaInput, ListTablesInput
from pgmcp.utils.errors import handle_error
from pgmcp.utils.formatting import (
    format_hidden_table,
    format_schema_info,
    format_table_list,
)


async def run_schema(
    params: GetSchemaInput, guard: QueryGuard, pool: PostgresPool
) -> str:
    # Hidden tables are rejected before their metadata is fetched
    if params.table and guard.is_table_hidden(params.table):
        return format_hidden_table(params.table)

    try:
        rows = await pool.query_metadata(MetadataKind.COLUMNS, table=params.table or None)
    except Exception as e:
        return handle_error(e)

    visible = guard.filter_schema(rows, requested_table=params.table or None)
    if isinstance(visible, HiddenTable):
        return format_hidden_table(visible.table)
    return format_schema_info(visible, params.table, fmt=params.response_format)


async def run_tables(
    params: ListTablesInput, guard: QueryGuard, pool: PostgresPool
) -> str:
    try:
        rows = await pool.query_metadata(MetadataKind.TABLES)
    except Exception as e:
        return handle_error(e)

    return format_table_list(guard.filter_table_list(rows), fmt=params.response_format)


def register_schema_tools(mcp: FastMCP, guard: QueryGuard, pool: PostgresPool):
    from pgmcp.tools.dispatch import handle_request

    @mcp.tool(
        name="schema",
        annotations={
            "title": "Get Database Schema",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": False,
        },
    )
    async def schema(params: GetSchemaInput) -> str:
        """Get column metadata for one table, or for every table when no table
        is given: column names, data types, nullability and defaults.
        Hidden tables and columns are filtered out."""
        return await handle_request(params, guard, pool)

    @mcp.tool(
        name="tables",
        annotations={
            "title": "List Database Tables",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": False,
        },
    )
    async def tables(params: ListTablesInput) -> str:
        """List all tables and views with their schema and type.
        System schemas (pg_catalog, information_schema) and hidden tables
        are filtered out."""
        return await handle_request(params, guard, pool)
