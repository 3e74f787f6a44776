from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from eumgrid.grid.columns import apply_overrides, convert_headers_to_columns, format_cell, resolve_kind
from eumgrid.grid.models import FieldDescriptor, HeaderDescriptor


def _header(code: str, *, width: int = 100, decimals: int = 0, title: str = "Col") -> HeaderDescriptor:
    return HeaderDescriptor.model_validate(
        {
            "seq": 1,
            "bandname": "",
            "columnname": title,
            "columnformat": code,
            "columnformatnumber": decimals,
            "width": width,
            "footername": "",
            "footerformat": None,
            "protocolFormatString": "",
        }
    )


def _single(code: str, field_type: str = "string", **kwargs: Any):
    return convert_headers_to_columns([_header(code, **kwargs)], [FieldDescriptor(name="value", type=field_type)])[0]


def test_fixed_decimal_number_column() -> None:
    column = _single("F", decimals=2)

    assert column.type == "number"
    assert column.text_align == "right"
    assert column.format == "{0:n2}"
    assert column.class_name == "eum-text-right"


def test_date_column_is_centered() -> None:
    column = _single("d")

    assert column.type == "date"
    assert column.text_align == "center"
    assert column.format is None


def test_unrecognized_code_falls_back_to_field_type() -> None:
    column = _single("zz", field_type="boolean")

    assert column.type == "boolean"
    assert column.text_align == "center"


@pytest.mark.parametrize(
    ("code", "expected_type", "expected_align"),
    [
        ("s", "string", "left"),
        ("S", "string", "center"),
        ("sr", "string", "right"),
        ("SR", "string", "right"),
        ("i", "number", "right"),
        ("I", "number", "right"),
        ("f", "number", "right"),
        ("fm", "number", "center"),
        ("FM", "number", "center"),
        ("DD", "date", "center"),
        ("dt", "date", "center"),
        ("Da", "date", "center"),
    ],
)
def test_format_code_table(code: str, expected_type: str, expected_align: str) -> None:
    kind = resolve_kind(code, None)

    assert kind.type == expected_type
    assert kind.text_align == expected_align


def test_unrecognized_code_without_field_defaults_to_left_string() -> None:
    kind = resolve_kind("??", None)

    assert (kind.type, kind.text_align) == ("string", "left")


def test_recognized_code_wins_over_field_type() -> None:
    column = _single("i", field_type="date")

    assert column.type == "number"


def test_numeric_formats() -> None:
    assert _single("f").format == "{0:n}"
    assert _single("f", decimals=3).format == "{0:n3}"
    assert _single("I").format == "{0:n0}"
    assert _single("fm", decimals=2).format is None
    assert _single("s").format is None


def test_zero_width_hides_column() -> None:
    hidden = _single("s", width=0)
    shown = _single("s", width=120)

    assert hidden.hidden is True
    assert hidden.width is None
    assert shown.hidden is False
    assert shown.width == "120px"


def test_headers_pair_with_fields_by_position_not_name() -> None:
    headers = [_header("s", title="Name"), _header("i", title="Qty")]
    fields = [FieldDescriptor(name="qty", type="number"), FieldDescriptor(name="name", type="string")]

    columns = convert_headers_to_columns(headers, fields)

    assert [(column.field, column.title, column.type) for column in columns] == [
        ("qty", "Name", "string"),
        ("name", "Qty", "number"),
    ]


def test_missing_field_descriptor_gets_placeholder() -> None:
    headers = [_header("s", title="A"), _header("s", title="B"), _header("s", title="C")]

    columns = convert_headers_to_columns(headers, [FieldDescriptor(name="a")])

    assert [column.field for column in columns] == ["a", "col_1", "col_2"]


def test_overrides_produce_new_columns() -> None:
    original = convert_headers_to_columns(
        [_header("f", title="Price")], [FieldDescriptor(name="UnitPrice", type="number")]
    )

    merged = apply_overrides(original, {"UnitPrice": {"width": "200px", "format": "{0:n4}"}})

    assert merged[0].width == "200px"
    assert merged[0].format == "{0:n4}"
    assert original[0].width == "100px"


def test_format_cell_uses_column_format() -> None:
    number = _single("F", decimals=2)
    whole = _single("i")
    date_column = _single("d")

    assert format_cell(number, 1234.5) == "1,234.50"
    assert format_cell(whole, 1234.4) == "1,234"
    assert format_cell(date_column, datetime(2024, 1, 15)) == "2024-01-15"
    assert format_cell(date_column, None) == ""
