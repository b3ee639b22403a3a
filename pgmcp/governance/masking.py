"""Data masking and visibility filtering for query results and metadata.

Hidden tables and columns are removed entirely; sensitive fields stay in
the result but have their non-null values replaced with MASK. All names are
compared lower-cased. Functions here never mutate their inputs: they either
return the input objects untouched or build new lists and rows.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, NamedTuple, Optional, Union

MASK = "***"

DEFAULT_SENSITIVE_FIELDS = frozenset(
    {
        "password",
        "passwd",
        "pwd",
        "secret",
        "token",
        "api_key",
        "apikey",
        "private_key",
        "privatekey",
        "credit_card",
        "creditcard",
        "card_number",
        "cardnumber",
        "ssn",
        "social_security",
        "tax_id",
    }
)


def _normalize(names: Iterable[str]) -> frozenset[str]:
    return frozenset(n.strip().lower() for n in names if n and n.strip())


@dataclass(frozen=True)
class MaskingPolicy:
    """Which tables, columns and fields to hide or redact."""

    enabled: bool = True
    hidden_tables: frozenset[str] = frozenset()
    hidden_columns: frozenset[str] = frozenset()
    sensitive_fields: frozenset[str] = DEFAULT_SENSITIVE_FIELDS

    @classmethod
    def build(
        cls,
        enabled: bool = True,
        hidden_tables: Iterable[str] = (),
        hidden_columns: Iterable[str] = (),
        extra_sensitive_fields: Iterable[str] = (),
    ) -> "MaskingPolicy":
        return cls(
            enabled=enabled,
            hidden_tables=_normalize(hidden_tables),
            hidden_columns=_normalize(hidden_columns),
            sensitive_fields=DEFAULT_SENSITIVE_FIELDS | _normalize(extra_sensitive_fields),
        )

    def is_table_hidden(self, table_name: str) -> bool:
        return self.enabled and table_name.lower() in self.hidden_tables

    def is_column_hidden(self, column_name: str) -> bool:
        return self.enabled and column_name.lower() in self.hidden_columns

    def is_sensitive(self, field_name: str) -> bool:
        return self.enabled and field_name.lower() in self.sensitive_fields


@dataclass(frozen=True)
class FieldDescriptor:
    """One column of a query result."""

    name: Optional[str]
    type_id: Optional[int] = None

    @classmethod
    def from_column(cls, column: Any) -> "FieldDescriptor":
        """Build from a DB-API cursor description entry (psycopg Column)."""
        return cls(
            name=getattr(column, "name", None),
            type_id=getattr(column, "type_code", None),
        )


class MaskedResult(NamedTuple):
    rows: list[dict[str, Any]]
    fields: list[FieldDescriptor]


def mask_result(
    rows: list[dict[str, Any]],
    fields: list[FieldDescriptor],
    policy: MaskingPolicy,
) -> MaskedResult:
    """Drop hidden columns and redact sensitive values in a result set.

    Returns the original `rows` and `fields` objects when masking is off,
    there are no rows, or no field is hidden or sensitive. Otherwise every
    row is rebuilt with only the visible fields, in field order. Null or
    missing values are never masked. Field descriptors without a usable
    name and rows that are not mappings are dropped.
    """
    if not policy.enabled or not rows:
        return MaskedResult(rows, fields)

    visible: list[FieldDescriptor] = []
    sensitive: set[str] = set()
    for f in fields:
        name = getattr(f, "name", None)
        if not isinstance(name, str) or not name:
            continue
        if policy.is_column_hidden(name):
            continue
        visible.append(f)
        if policy.is_sensitive(name):
            sensitive.add(name)

    if not sensitive and len(visible) == len(fields):
        return MaskedResult(rows, fields)

    names = [f.name for f in visible]
    masked_rows = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        masked: dict[str, Any] = {}
        for name in names:
            if name not in row:
                continue
            value = row[name]
            if name in sensitive and value is not None:
                value = MASK
            masked[name] = value
        masked_rows.append(masked)

    return MaskedResult(masked_rows, visible)


def _table_name(entry: Any) -> Optional[str]:
    try:
        name = entry.get("table_name")
    except AttributeError:
        return None
    return name if isinstance(name, str) else None


def filter_tables(
    tables: list[dict[str, Any]], policy: MaskingPolicy
) -> list[dict[str, Any]]:
    """Remove hidden tables from a table listing, preserving order.

    Entries without a string `table_name` are skipped.
    """
    if not policy.enabled or not policy.hidden_tables or not tables:
        return tables
    visible = []
    for entry in tables:
        name = _table_name(entry)
        if name is None or policy.is_table_hidden(name):
            continue
        visible.append(entry)
    return visible


@dataclass(frozen=True)
class HiddenTable:
    """Schema lookup result for a table excluded by the masking policy."""

    table: str
    hidden: bool = field(default=True, init=False)


def filter_schema(
    rows: list[dict[str, Any]],
    policy: MaskingPolicy,
    table: Optional[str] = None,
) -> Union[list[dict[str, Any]], HiddenTable]:
    """Remove hidden tables and columns from information_schema.columns rows.

    With `table` set, a hidden table yields HiddenTable instead of rows so
    callers can tell it apart from a table without columns; otherwise only
    hidden columns are removed. Rows that are not mappings or lack a string
    column or table name are skipped.
    """
    if table is not None and policy.is_table_hidden(table):
        return HiddenTable(table)
    if not policy.enabled:
        return rows

    visible = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        column = row.get("column_name")
        if not isinstance(column, str) or policy.is_column_hidden(column):
            continue
        if table is None:
            name = row.get("table_name")
            if not isinstance(name, str) or policy.is_table_hidden(name):
                continue
        visible.append(row)
    return visible
