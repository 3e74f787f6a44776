"""Filter, sort and page coerced rows in memory."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .rows import RowRecord, coerce_date, coerce_number, js_string

SortDirection = Literal["asc", "desc"]
FilterOperator = Literal[
    "eq",
    "neq",
    "lt",
    "lte",
    "gt",
    "gte",
    "contains",
    "doesnotcontain",
    "startswith",
    "endswith",
    "isnull",
    "isnotnull",
    "isempty",
    "isnotempty",
]


class _QueryModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class SortDescriptor(_QueryModel):
    field: str
    dir: SortDirection | None = "asc"


class FilterDescriptor(_QueryModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    field: str
    operator: FilterOperator
    value: Any = None
    ignore_case: bool = Field(default=True, alias="ignoreCase")


class CompositeFilterDescriptor(_QueryModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    logic: Literal["and", "or"] = "and"
    filters: list[FilterDescriptor | CompositeFilterDescriptor] = Field(default_factory=list)


CompositeFilterDescriptor.model_rebuild()


class QueryState(_QueryModel):
    """Caller-controlled sort keys, filter tree and paging window."""

    sort: list[SortDescriptor] = Field(default_factory=list)
    filter: CompositeFilterDescriptor | None = None
    skip: int = Field(default=0, ge=0)
    take: int = Field(default=50, gt=0)


@dataclass(frozen=True)
class DataResult:
    """Visible slice plus the filtered, pre-pagination row count."""

    data: list[RowRecord]
    total: int


def process(
    rows: Sequence[RowRecord],
    state: QueryState,
    *,
    sorting: bool = True,
    filtering: bool = True,
    paging: bool = True,
) -> DataResult:
    """Apply filter, then sort, then page; each step can be switched off."""
    data = list(rows)
    if filtering and state.filter is not None:
        data = [row for row in data if matches(row, state.filter)]
    if sorting and state.sort:
        data = sort_rows(data, state.sort)
    total = len(data)
    if paging:
        data = data[state.skip : state.skip + state.take]
    return DataResult(data=data, total=total)


# -- sorting -----------------------------------------------------------------


def _sort_key(value: Any) -> tuple[Any, ...]:
    if value is None:
        return (0,)
    if isinstance(value, str):
        return (1, value.casefold(), value)
    if isinstance(value, datetime):
        return (1, _naive(value))
    return (1, value)


def sort_rows(rows: Sequence[RowRecord], descriptors: Sequence[SortDescriptor]) -> list[RowRecord]:
    """Stable multi-key sort; the first descriptor is the primary key."""
    data = list(rows)
    for descriptor in reversed([item for item in descriptors if item.dir is not None]):
        data.sort(
            key=lambda row, field=descriptor.field: _sort_key(row.get(field)),
            reverse=descriptor.dir == "desc",
        )
    return data


# -- filtering ---------------------------------------------------------------


def matches(row: Mapping[str, Any], node: FilterDescriptor | CompositeFilterDescriptor) -> bool:
    if isinstance(node, CompositeFilterDescriptor):
        if not node.filters:
            return True
        results = (matches(row, child) for child in node.filters)
        return all(results) if node.logic == "and" else any(results)
    return _match_leaf(row.get(node.field), node)


def _naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _align(left: Any, right: Any, ignore_case: bool) -> tuple[Any, Any]:
    """Convert the filter value to the row value's type before comparing."""
    if isinstance(left, datetime):
        parsed = coerce_date(right)
        return _naive(left), _naive(parsed) if parsed is not None else None
    if isinstance(left, bool):
        if isinstance(right, str):
            return left, right.strip().lower() == "true"
        return left, bool(right)
    if isinstance(left, (int, float)):
        return left, coerce_number(right) if isinstance(right, str) else right
    if isinstance(left, str):
        text = js_string(right)
        return (left.casefold(), text.casefold()) if ignore_case else (left, text)
    return left, right


def _text_pair(left: Any, right: Any, ignore_case: bool) -> tuple[str, str]:
    left_text = js_string(left) if left is not None else ""
    right_text = js_string(right) if right is not None else ""
    if ignore_case:
        return left_text.casefold(), right_text.casefold()
    return left_text, right_text


_ORDERING: dict[str, Callable[[Any, Any], bool]] = {
    "lt": lambda a, b: a < b,
    "lte": lambda a, b: a <= b,
    "gt": lambda a, b: a > b,
    "gte": lambda a, b: a >= b,
}

_TEXT: dict[str, Callable[[str, str], bool]] = {
    "contains": lambda a, b: b in a,
    "doesnotcontain": lambda a, b: b not in a,
    "startswith": lambda a, b: a.startswith(b),
    "endswith": lambda a, b: a.endswith(b),
}


def _match_leaf(value: Any, descriptor: FilterDescriptor) -> bool:
    operator = descriptor.operator
    if operator == "isnull":
        return value is None
    if operator == "isnotnull":
        return value is not None
    if operator == "isempty":
        return value == ""
    if operator == "isnotempty":
        return value != ""
    if operator in _TEXT:
        return _TEXT[operator](*_text_pair(value, descriptor.value, descriptor.ignore_case))

    if value is None or descriptor.value is None:
        equal = value is None and descriptor.value is None
        if operator == "eq":
            return equal
        if operator == "neq":
            return not equal
        return False

    left, right = _align(value, descriptor.value, descriptor.ignore_case)
    if right is None:
        return operator == "neq"
    if operator == "eq":
        return left == right
    if operator == "neq":
        return left != right
    try:
        return _ORDERING[operator](left, right)
    except TypeError:
        return False
