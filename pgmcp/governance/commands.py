"""Lexical SQL command classification.

Extracts the leading keyword of a statement after stripping comments.
This is a best-effort gate, not a parser: keywords inside string literals
or nested comments are not detected.
"""
import re
from enum import Enum


class Command(str, Enum):
    """Leading SQL keywords recognized by the access policy."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CREATE = "CREATE"
    DROP = "DROP"
    ALTER = "ALTER"
    TRUNCATE = "TRUNCATE"
    GRANT = "GRANT"
    REVOKE = "REVOKE"
    BEGIN = "BEGIN"
    COMMIT = "COMMIT"
    ROLLBACK = "ROLLBACK"
    EXPLAIN = "EXPLAIN"
    ANALYZE = "ANALYZE"
    VACUUM = "VACUUM"
    COPY = "COPY"
    UNKNOWN = "UNKNOWN"


_LINE_COMMENT = re.compile(r"--.*$", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)

_KEYWORDS: dict[str, Command] = {
    c.value: c for c in Command if c is not Command.UNKNOWN
}


def classify_command(sql: str) -> Command:
    """Return the leading command of `sql`, or Command.UNKNOWN."""
    cleaned = _LINE_COMMENT.sub("", sql)
    cleaned = _BLOCK_COMMENT.sub("", cleaned)
    words = cleaned.strip().upper().split()
    if not words:
        return Command.UNKNOWN
    return _KEYWORDS.get(words[0], Command.UNKNOWN)
