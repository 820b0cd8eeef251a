"""Reshape arbitrary result rows into chart records of the form {name, ...metrics}."""
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any


def _is_numeric(v: Any) -> bool:
    return isinstance(v, (int, float, Decimal)) and not isinstance(v, bool)


def stringify(v: Any) -> str:
    """Stable label formatting for a chart category."""
    if v is None:
        return "null"
    if isinstance(v, (datetime, date, time)):
        return v.isoformat()
    return str(v)


def shape_rows(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if not rows:
        return []

    # Already chart-shaped
    if any("name" in row for row in rows):
        return rows

    keys = list(rows[0].keys())
    if not keys:
        return [{"name": "null"} for _ in rows]

    label = keys[0]
    if len(keys) == 2 and all(_is_numeric(row.get(keys[1])) for row in rows):
        return [{"name": stringify(row.get(label)), "value": row.get(keys[1])} for row in rows]

    return [
        {"name": stringify(row.get(label)), **{k: row.get(k) for k in keys[1:]}}
        for row in rows
    ]
