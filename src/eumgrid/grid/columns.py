"""Map server column descriptors onto client column models."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from loguru import logger

from .models import ColumnModel, ColumnType, FieldDescriptor, HeaderDescriptor, TextAlign


@dataclass(frozen=True)
class ColumnKind:
    type: ColumnType
    text_align: TextAlign

    @property
    def class_name(self) -> str:
        return f"eum-text-{self.text_align}"


STRING_LEFT = ColumnKind("string", "left")
STRING_CENTER = ColumnKind("string", "center")
STRING_RIGHT = ColumnKind("string", "right")
NUMBER_RIGHT = ColumnKind("number", "right")
NUMBER_CENTER = ColumnKind("number", "center")
DATE_CENTER = ColumnKind("date", "center")
BOOLEAN_CENTER = ColumnKind("boolean", "center")

# The uppercase `S` is the only code whose case matters.
CASE_SENSITIVE_FORMATS: dict[str, ColumnKind] = {
    "S": STRING_CENTER,
}

FORMAT_CODES: dict[str, ColumnKind] = {
    "s": STRING_LEFT,
    "sr": STRING_RIGHT,
    "i": NUMBER_RIGHT,
    "f": NUMBER_RIGHT,
    "fm": NUMBER_CENTER,
    "d": DATE_CENTER,
    "dd": DATE_CENTER,
    "dt": DATE_CENTER,
    "da": DATE_CENTER,
}

FIELD_TYPES: dict[str, ColumnKind] = {
    "number": NUMBER_RIGHT,
    "date": DATE_CENTER,
    "boolean": BOOLEAN_CENTER,
}


def resolve_kind(column_format: str | None, field: FieldDescriptor | None) -> ColumnKind:
    """Look up type and alignment for a format code.

    A recognized code wins even when the field descriptor disagrees; only an
    unrecognized code falls back to the descriptor's declared type.
    """
    code = (column_format or "").strip()
    if code in CASE_SENSITIVE_FORMATS:
        return CASE_SENSITIVE_FORMATS[code]
    kind = FORMAT_CODES.get(code.lower())
    if kind is not None:
        return kind
    if field is None:
        return STRING_LEFT
    return FIELD_TYPES.get((field.type or "").lower(), STRING_LEFT)


def resolve_format(column_format: str | None, decimals: int | None) -> str | None:
    code = (column_format or "").strip().lower()
    if code == "f":
        if decimals and decimals > 0:
            return f"{{0:n{decimals}}}"
        return "{0:n}"
    if code == "i":
        return "{0:n0}"
    return None


def convert_headers_to_columns(
    headers: Sequence[HeaderDescriptor],
    datafields: Sequence[FieldDescriptor],
) -> list[ColumnModel]:
    """Build one column per header, pairing `headers[i]` with `datafields[i]`.

    Pairing is positional, not by name. A missing field descriptor yields a
    `col_<index>` placeholder field.
    """
    if len(datafields) != len(headers):
        logger.warning("grid.columns.mismatch headers={} datafields={}", len(headers), len(datafields))

    columns: list[ColumnModel] = []
    for index, header in enumerate(headers):
        field = datafields[index] if index < len(datafields) else None
        kind = resolve_kind(header.column_format, field)
        width = header.width
        columns.append(
            ColumnModel(
                field=(field.name if field is not None and field.name else f"col_{index}"),
                title=header.column_name,
                type=kind.type,
                width=f"{width}px" if width is not None and width > 0 else None,
                format=resolve_format(header.column_format, header.column_format_number),
                filterable=True,
                sortable=True,
                hidden=width == 0,
                text_align=kind.text_align,
                class_name=kind.class_name,
            )
        )
    return columns


def apply_overrides(
    columns: Sequence[ColumnModel],
    overrides: Mapping[str, Mapping[str, Any]] | None,
) -> list[ColumnModel]:
    """Merge per-field partial overrides into new column models."""
    if not overrides:
        return list(columns)
    merged: list[ColumnModel] = []
    for column in columns:
        override = overrides.get(column.field)
        if not override:
            merged.append(column)
            continue
        merged.append(ColumnModel.model_validate({**column.model_dump(), **override}))
    return merged


def format_cell(column: ColumnModel, value: Any) -> str:
    """Render a coerced value with the column's display format."""
    if value is None:
        return ""
    if column.type == "date" and isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    if column.type == "boolean":
        return "true" if value else "false"
    decimals = _numeric_decimals(column.format)
    if decimals is not None and isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:,.{decimals}f}"
    return str(value)


def _numeric_decimals(display_format: str | None) -> int | None:
    if not display_format:
        return None
    if display_format == "{0:n}":
        return 2
    if display_format.startswith("{0:n") and display_format.endswith("}"):
        digits = display_format[4:-1]
        if digits.isdigit():
            return int(digits)
    return None
