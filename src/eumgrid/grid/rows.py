"""Coerce raw server rows into the types their columns declare."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any, TypeAlias

from eumgrid.utils.dates import parse_yyyymmdd

from .models import ColumnModel, ColumnType

RowRecord: TypeAlias = dict[str, Any]

_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:inf(?:inity)?|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))", re.IGNORECASE)
_COMPACT_DATE = re.compile(r"^\d{8}$")

DEFAULTS: dict[ColumnType, Any] = {
    "number": 0,
    "date": None,
    "boolean": False,
    "string": "",
}


def parse_float(value: str) -> float | None:
    """Parse the leading numeric prefix of `value`, like `parseFloat`."""
    match = _LEADING_FLOAT.match(value)
    if match is None:
        return None
    return float(match.group(1))


def js_truthy(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def js_string(value: Any) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def coerce_number(value: Any) -> int | float:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return 0 if isinstance(value, float) and math.isnan(value) else value
    if isinstance(value, str):
        parsed = parse_float(value)
    else:
        try:
            parsed = float(value)
        except (TypeError, ValueError):
            parsed = None
    if parsed is None or math.isnan(parsed):
        return 0
    return parsed


def coerce_date(value: Any) -> datetime | None:
    if not js_truthy(value):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if _COMPACT_DATE.match(text):
            return parse_yyyymmdd(text)
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Numeric values are epoch milliseconds.
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def coerce_value(column_type: ColumnType, value: Any) -> Any:
    if column_type == "number":
        return coerce_number(value)
    if column_type == "date":
        return coerce_date(value)
    if column_type == "boolean":
        return js_truthy(value)
    return js_string(value) if value is not None else ""


def coerce_row(columns: Sequence[ColumnModel], row: Mapping[str, Any]) -> RowRecord:
    """Project one raw row onto `columns`; extra server fields are dropped."""
    record: RowRecord = {}
    for column in columns:
        if column.field in row:
            record[column.field] = coerce_value(column.type, row[column.field])
        else:
            record[column.field] = DEFAULTS[column.type]
    return record


def coerce_rows(columns: Sequence[ColumnModel], rows: Sequence[Mapping[str, Any]]) -> list[RowRecord]:
    return [coerce_row(columns, row) for row in rows]
