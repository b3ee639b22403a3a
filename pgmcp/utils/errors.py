"""Database error translation with actionable messages.

Only failures from PostgreSQL or the pool pass through here. Policy
denials are reported by the tools directly and never reach handle_error.
"""
import psycopg


def handle_error(e: Exception) -> str:
    """Return a human-readable, actionable error message.

    The driver's own message is always included so callers see the
    database error verbatim.
    """
    detail = str(e).strip()

    if isinstance(e, RuntimeError) and "not initialized" in detail.lower():
        return (
            "PostgreSQL error: the server has no database connection. "
            "Check POSTGRES_URL or POSTGRES_HOST and restart the server."
        )

    if isinstance(e, psycopg.OperationalError):
        msg = detail.lower()
        if "connection refused" in msg or "could not connect" in msg:
            return (
                f"PostgreSQL error: {detail}\n"
                "Cannot connect to the database. Check that it is running and "
                "that POSTGRES_HOST / POSTGRES_PORT are correct."
            )
        if "terminating connection" in msg or "server closed" in msg:
            return (
                f"PostgreSQL error: {detail}\n"
                "The connection was terminated. Retry your query; the pool "
                "will reconnect automatically."
            )

    if isinstance(e, psycopg.errors.InsufficientPrivilege):
        return (
            f"PostgreSQL error: {detail}\n"
            "Permission denied for the configured database user."
        )

    if isinstance(e, psycopg.errors.UndefinedTable):
        return (
            f"PostgreSQL error: {detail}\n"
            "Use the tables tool to discover available tables."
        )

    if isinstance(e, psycopg.errors.SyntaxError):
        return f"PostgreSQL error: SQL syntax error: {detail}. Check your query and try again."

    if isinstance(e, psycopg.errors.QueryCanceled):
        return (
            f"PostgreSQL error: {detail}\n"
            "Query timed out. Try limiting rows with LIMIT or simplifying the query."
        )

    if isinstance(e, psycopg.errors.ConnectionException):
        return (
            f"PostgreSQL error: {detail}\n"
            "Lost connection to the database. Retry in a few seconds."
        )

    if isinstance(e, TimeoutError):
        return (
            "PostgreSQL error: connection timed out. The database may be "
            "overloaded or unreachable; retry shortly."
        )

    if isinstance(e, psycopg.Error):
        return f"PostgreSQL error: {detail}"

    return f"Error: {type(e).__name__}: {detail}"
