"""SQL query execution tool with access control and result masking."""
import logging

from mcp.server.fastmcp import FastMCP

from pgmcp.db import PostgresPool
from pgmcp.governance.policy import QueryGuard
from pgmcp.tools.requests import ExecuteQueryInput
from pgmcp.utils.errors import handle_error
from pgmcp.utils.formatting import format_query_results

logger = logging.getLogger(__name__)


async def run_query(
    params: ExecuteQueryInput, guard: QueryGuard, pool: PostgresPool
) -> str:
    decision = guard.classify_and_decide(params.sql)
    if not decision.allowed:
        logger.info(
            f"Denied {decision.command.value} statement at level {decision.level.value}"
        )
        return decision.denied_summary

    try:
        result = await pool.execute(params.sql)
    except Exception as e:
        return handle_error(e)

    rows, fields = guard.apply_masking(result.rows, result.fields)
    return format_query_results(
        rows,
        fields,
        fmt=params.response_format,
        affected_rows=result.affected_rows,
        truncated=result.truncated,
    )


def register_query_tools(mcp: FastMCP, guard: QueryGuard, pool: PostgresPool):
    from pgmcp.tools.dispatch import handle_request

    @mcp.tool(
        name="query",
        annotations={
            "title": "Execute SQL Query",
            "readOnlyHint": False,
            "destructiveHint": True,
            "idempotentHint": False,
            "openWorldHint": False,
        },
    )
    async def query(params: ExecuteQueryInput) -> str:
        """Execute a SQL statement against the connected PostgreSQL database.

        The statement's leading command must be permitted by the configured
        access level (POSTGRES_QUERY_LEVEL: readonly, modify, ddl or custom).
        Hidden columns are removed from the result and sensitive fields
        (passwords, tokens, card numbers, ...) are returned as "***".

        Returns rows, row count and field information.
        """
        return await handle_request(params, guard, pool)
