"""Server-described grid pipeline."""

from .api import fetch_grid_data
from .columns import apply_overrides, convert_headers_to_columns, format_cell
from .models import (
    ColumnModel,
    FieldDescriptor,
    GridData,
    GridRequest,
    GridRequestFactory,
    GridResponse,
    HeaderDescriptor,
    create_grid_request,
)
from .orchestrator import GridOptions, GridRequestOrchestrator
from .query import (
    CompositeFilterDescriptor,
    DataResult,
    FilterDescriptor,
    QueryState,
    SortDescriptor,
    process,
)
from .rows import coerce_row, coerce_rows

__all__ = [
    "ColumnModel",
    "CompositeFilterDescriptor",
    "DataResult",
    "FieldDescriptor",
    "FilterDescriptor",
    "GridData",
    "GridOptions",
    "GridRequest",
    "GridRequestFactory",
    "GridRequestOrchestrator",
    "GridResponse",
    "HeaderDescriptor",
    "QueryState",
    "SortDescriptor",
    "apply_overrides",
    "coerce_row",
    "coerce_rows",
    "convert_headers_to_columns",
    "create_grid_request",
    "fetch_grid_data",
    "format_cell",
    "process",
]
