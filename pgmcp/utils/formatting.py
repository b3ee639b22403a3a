"""Response formatting helpers."""
import json
from enum import Enum
from typing import Any

from pgmcp.governance.masking import FieldDescriptor


class ResponseFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


def format_query_results(
    rows: list[dict],
    fields: list[FieldDescriptor],
    fmt: ResponseFormat = ResponseFormat.JSON,
    affected_rows: int = None,
    truncated: bool = False,
) -> str:
    if affected_rows is not None:
        header = f"Query executed successfully. Rows affected: {affected_rows}"
    else:
        header = f"Query executed successfully. Rows: {len(rows)}"
    if truncated:
        header += (
            f"\nResults truncated to the first {len(rows)} rows. "
            "Use LIMIT or a narrower WHERE clause to see the rest."
        )
    if fmt == ResponseFormat.JSON:
        payload = {
            "rows": rows,
            "rowCount": len(rows),
            "fields": [{"name": f.name, "type": f.type_id} for f in fields],
        }
        if affected_rows is not None:
            payload["affectedRows"] = affected_rows
        if truncated:
            payload["truncated"] = True
        return header + "\n\n" + json.dumps(payload, indent=2, default=str)
    if affected_rows is not None:
        return header
    if not rows:
        return header + "\n\n_No results returned._"
    cols = [f.name for f in fields] or list(rows[0].keys())
    lines = [header, ""]
    lines.append("| " + " | ".join(cols) + " |")
    lines.append("| " + " | ".join(["---"] * len(cols)) + " |")
    for row in rows[:50]:
        vals = [str(row.get(c, "")) for c in cols]
        lines.append("| " + " | ".join(vals) + " |")
    if len(rows) > 50:
        lines.append(f"\n_...and {len(rows) - 50} more rows (use LIMIT to control)_")
    return "\n".join(lines)


def format_table_list(
    tables: list[dict], fmt: ResponseFormat = ResponseFormat.JSON
) -> str:
    if fmt == ResponseFormat.JSON:
        return json.dumps({"tables": tables}, indent=2, default=str)
    if not tables:
        return "_No tables found._"
    lines = ["## Tables\n"]
    for t in tables:
        schema = t.get("table_schema", "public")
        lines.append(f"- **{schema}.{t.get('table_name', 'unknown')}**")
        if t.get("table_type"):
            lines.append(f"  - {t['table_type']}")
    return "\n".join(lines)


def format_schema_info(
    columns: list[dict[str, Any]],
    table_name: str = None,
    fmt: ResponseFormat = ResponseFormat.JSON,
) -> str:
    if fmt == ResponseFormat.JSON:
        return json.dumps({"schema": columns}, indent=2, default=str)
    title = f"`{table_name}`" if table_name else "all tables"
    lines = [f"## Schema: {title}\n"]
    lines.append("| Table | Column | Type | Nullable | Default |")
    lines.append("| --- | --- | --- | --- | --- |")
    for c in columns:
        lines.append(
            f"| {c.get('table_name', '')} | {c['column_name']} | {c['data_type']} | "
            f"{c.get('is_nullable', 'YES')} | {c.get('column_default') or ''} |"
        )
    return "\n".join(lines)


def format_hidden_table(table: str) -> str:
    return f'Table "{table}" is hidden due to security settings.'
