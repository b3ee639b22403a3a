"""Async PostgreSQL connection pool.

The pool is an explicitly owned handle: main.py constructs one PostgresPool,
opens it in the server lifespan and passes it to the tool modules. Tests
build their own instance (or a mock) and close it when done.
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncGenerator, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from pgmcp.config import ServerConfig
from pgmcp.governance.masking import FieldDescriptor

logger = logging.getLogger(__name__)


class MetadataKind(str, Enum):
    TABLES = "tables"
    COLUMNS = "columns"


_SYSTEM_SCHEMAS_FILTER = "table_schema NOT IN ('information_schema', 'pg_catalog')"

_TABLES_SQL = f"""SELECT table_schema, table_name, table_type
FROM information_schema.tables
WHERE {_SYSTEM_SCHEMAS_FILTER}
ORDER BY table_schema, table_name"""

_COLUMNS_SQL = f"""SELECT table_schema, table_name, column_name, data_type,
       is_nullable, column_default, character_maximum_length
FROM information_schema.columns
WHERE {_SYSTEM_SCHEMAS_FILTER}"""

_COLUMNS_ORDER = " ORDER BY table_schema, table_name, ordinal_position"


@dataclass
class QueryResult:
    """Raw, unmasked result of one statement."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[FieldDescriptor] = field(default_factory=list)
    affected_rows: Optional[int] = None
    truncated: bool = False


class PostgresPool:
    """Manages the async connection pool to PostgreSQL."""

    def __init__(self, config: ServerConfig):
        self._config = config
        self._pool: Optional[AsyncConnectionPool] = None

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    async def initialize(self, conninfo: str):
        """Open the connection pool. Call close() before initializing again."""
        if self._pool is not None:
            raise RuntimeError("Pool already initialized. Call close() first.")
        pool = AsyncConnectionPool(
            conninfo=conninfo,
            min_size=1,
            max_size=self._config.pool_max_size,
            open=False,
            kwargs={"row_factory": dict_row, "autocommit": True},
            max_idle=self._config.pool_max_idle,
            timeout=self._config.connect_timeout,
        )
        await pool.open()
        self._pool = pool
        logger.info(
            f"PostgreSQL connection pool initialized (max_size={self._config.pool_max_size})"
        )

    async def close(self):
        if self._pool is not None:
            pool, self._pool = self._pool, None
            await pool.close()
            logger.info("PostgreSQL connection pool closed")

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        if self._pool is None:
            raise RuntimeError("Pool not initialized. Call initialize() first.")
        async with self._pool.connection() as conn:
            yield conn

    async def execute(self, sql: str, params: tuple = None) -> QueryResult:
        """Execute a statement and return its rows and field descriptors.

        At most `max_rows` rows are returned; `truncated` is set when the
        statement produced more. Statements without a result set report
        `affected_rows` instead.
        """
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, params)
                if cur.description is None:
                    return QueryResult(affected_rows=max(cur.rowcount, 0))
                limit = self._config.max_rows
                rows = await cur.fetchmany(limit + 1)
                truncated = len(rows) > limit
                if truncated:
                    logger.info(f"Result truncated to {limit} rows")
                return QueryResult(
                    rows=[dict(row) for row in rows[:limit]],
                    fields=[FieldDescriptor.from_column(c) for c in cur.description],
                    truncated=truncated,
                )

    async def query_metadata(
        self, kind: MetadataKind, table: str = None
    ) -> list[dict[str, Any]]:
        """Fetch raw information_schema rows in a read-only transaction."""
        if kind == MetadataKind.TABLES:
            sql, params = _TABLES_SQL, None
        elif table is not None:
            sql, params = _COLUMNS_SQL + " AND table_name = %s" + _COLUMNS_ORDER, (table,)
        else:
            sql, params = _COLUMNS_SQL + _COLUMNS_ORDER, None

        async with self.connection() as conn:
            async with conn.transaction():
                await conn.execute("SET TRANSACTION READ ONLY")
                async with conn.cursor() as cur:
                    await cur.execute(sql, params)
                    rows = await cur.fetchall()
                    return [dict(row) for row in rows]
