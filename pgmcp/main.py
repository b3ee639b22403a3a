"""PostgreSQL MCP Server: main entry point.

3 tools (query, schema, tables), access-level enforcement and
result masking via the query guard.
"""
import logging
from contextlib import asynccontextmanager

from mcp.server.fastmcp import FastMCP

from pgmcp.config import build_conninfo, config
from pgmcp.db import PostgresPool
from pgmcp.governance.policy import build_query_guard
from pgmcp.tools.query import register_query_tools
from pgmcp.tools.schema import register_schema_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

pool = PostgresPool(config)

# Built once; read-only for the life of the process
guard = build_query_guard()


@asynccontextmanager
async def app_lifespan(server: FastMCP):
    """Initialize and tear down the connection pool."""
    try:
        await pool.initialize(build_conninfo(config))
        logger.info("PostgreSQL MCP Server started (pool connected)")
    except Exception as e:
        logger.warning(
            f"Pool initialization failed (query tools will report errors): {e}"
        )

    try:
        yield {"pool": pool}
    finally:
        await pool.close()
        logger.info("PostgreSQL MCP Server stopped")


mcp = FastMCP(
    "postgres_mcp",
    instructions=(
        "MCP server for PostgreSQL database operations with query filtering "
        "and data masking"
    ),
    lifespan=app_lifespan,
    port=config.app_port,
)

register_query_tools(mcp, guard, pool)
register_schema_tools(mcp, guard, pool)


def main():
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
