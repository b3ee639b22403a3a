"""Route a typed tool request to its handler."""
from pgmcp.db import PostgresPool
from pgmcp.governance.policy import QueryGuard
from pgmcp.tools.query import run_query
from pgmcp.tools.requests import (
    ExecuteQueryInput,
    GetSchemaInput,
    ListTablesInput,
    ToolRequest,
)
from pgmcp.tools.schema import run_schema, run_tables


async def handle_request(request: ToolRequest, guard: QueryGuard, pool: PostgresPool) -> str:
    if isinstance(request, ExecuteQueryInput):
        return await run_query(request, guard, pool)
    if isinstance(request, GetSchemaInput):
        return await run_schema(request, guard, pool)
    if isinstance(request, ListTablesInput):
        return await run_tables(request, guard, pool)
    raise TypeError(f"Unsupported request type: {type(request).__name__}")
