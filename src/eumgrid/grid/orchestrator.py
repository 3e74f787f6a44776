"""Fetch, shape and query one server-described grid."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from functools import partial
from typing import Any, TypeAlias

from loguru import logger

from eumgrid.api.transport import AuthenticatedTransport
from eumgrid.errors import RequestValidationError

from .api import fetch_grid_data, validate_grid_request
from .columns import apply_overrides, convert_headers_to_columns
from .models import ColumnModel, GridRequest, GridResponse
from .query import CompositeFilterDescriptor, DataResult, QueryState, SortDescriptor, process
from .rows import RowRecord, coerce_rows

GridFetcher: TypeAlias = Callable[[GridRequest], Awaitable[GridResponse]]


@dataclass(frozen=True)
class GridOptions:
    """Which client-side query steps are enabled, and the initial page size."""

    show_sort: bool = True
    show_filter: bool = False
    enable_paging: bool = False
    default_page_size: int = 50


@dataclass(frozen=True)
class _CachedResult:
    rows_version: int
    state: QueryState
    options: GridOptions
    result: DataResult


class GridRequestOrchestrator:
    """Own the columns, rows and query state of one grid instance.

    Loads are never cancelled. Each `load` takes an issuance ticket and a
    response is applied only if its ticket is still the latest one issued, so a
    slow earlier request can never overwrite a newer one.
    """

    def __init__(
        self,
        transport: AuthenticatedTransport | None = None,
        *,
        fetcher: GridFetcher | None = None,
        options: GridOptions | None = None,
        column_overrides: Mapping[str, Mapping[str, Any]] | None = None,
        on_loading_change: Callable[[bool], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        on_data_load: Callable[[list[RowRecord]], None] | None = None,
        on_state_change: Callable[[QueryState], None] | None = None,
        on_sort_change: Callable[[list[SortDescriptor]], None] | None = None,
        on_filter_change: Callable[[CompositeFilterDescriptor | None], None] | None = None,
    ) -> None:
        if fetcher is None:
            if transport is None:
                raise ValueError("either transport or fetcher is required")
            fetcher = partial(fetch_grid_data, transport)
        self._fetch = fetcher
        self.options = options or GridOptions()
        self.column_overrides = dict(column_overrides or {})
        self._on_loading_change = on_loading_change
        self._on_error = on_error
        self._on_data_load = on_data_load
        self._on_state_change = on_state_change
        self._on_sort_change = on_sort_change
        self._on_filter_change = on_filter_change

        self.columns: list[ColumnModel] = []
        self.rows: list[RowRecord] = []
        self.error: str | None = None
        self.loading = False
        self.last_request: GridRequest | None = None
        self._state = self._initial_state()
        self._issued = 0
        self._rows_version = 0
        self._cache: _CachedResult | None = None

    # -- loading -------------------------------------------------------------

    @property
    def current_ticket(self) -> int:
        return self._issued

    async def load(self, request: GridRequest) -> bool:
        """Fetch `request` and apply it unless a newer load was issued meanwhile.

        Returns True when the response was applied to the grid.
        """
        self._issued += 1
        ticket = self._issued
        self.last_request = request

        try:
            validate_grid_request(request)
        except RequestValidationError as exc:
            self._set_loading(False)
            self._fail(str(exc))
            return False

        self.error = None
        self._set_loading(True)
        try:
            response = await self._fetch(request)
        except Exception as exc:
            if ticket != self._issued:
                return False
            logger.exception("grid.load.error call_id={}", request.call_id)
            self._fail(str(exc) or "Unexpected error while loading grid data")
            return False
        finally:
            if ticket == self._issued:
                self._set_loading(False)

        if ticket != self._issued:
            logger.info("grid.load.stale call_id={} ticket={} current={}", request.call_id, ticket, self._issued)
            return False

        if response.status != 200 or response.data is None:
            self._fail(response.message or "Failed to load grid data")
            return False

        data = response.data
        try:
            columns = apply_overrides(convert_headers_to_columns(data.headers, data.datafield), self.column_overrides)
            rows = coerce_rows(columns, data.rows)
        except Exception as exc:
            logger.exception("grid.load.shape_error call_id={}", request.call_id)
            self._fail(str(exc) or "Unexpected error while loading grid data")
            return False
        self.columns = columns
        self.rows = rows
        self._rows_version += 1
        self._cache = None

        logger.info(
            "grid.load.done call_id={} columns={} rows={} hidden={}",
            request.call_id,
            len(columns),
            len(rows),
            sum(1 for column in columns if column.hidden),
        )
        if self._on_data_load is not None:
            self._on_data_load(rows)
        return True

    async def reload(self) -> bool:
        if self.last_request is None:
            return False
        return await self.load(self.last_request)

    def _set_loading(self, loading: bool) -> None:
        if self.loading == loading:
            return
        self.loading = loading
        if self._on_loading_change is not None:
            self._on_loading_change(loading)

    def _fail(self, message: str) -> None:
        self.error = message
        logger.warning("grid.load.failed error={}", message)
        if self._on_error is not None:
            self._on_error(message)

    # -- columns and query state ---------------------------------------------

    def visible_columns(self) -> list[ColumnModel]:
        return [column for column in self.columns if not column.hidden]

    @property
    def state(self) -> QueryState:
        return self._state

    def current_state(self) -> QueryState:
        return self._state

    def set_state(self, state: QueryState | Mapping[str, Any]) -> None:
        new_state = state if isinstance(state, QueryState) else QueryState.model_validate(state)
        previous = self._state
        self._state = new_state
        if self._on_state_change is not None:
            self._on_state_change(new_state)
        if self._on_sort_change is not None and new_state.sort != previous.sort:
            self._on_sort_change(list(new_state.sort))
        if self._on_filter_change is not None and new_state.filter != previous.filter:
            self._on_filter_change(new_state.filter)

    def clear_filters(self) -> None:
        self._replace_state(filter=None)
        if self._on_filter_change is not None:
            self._on_filter_change(None)

    def clear_sort(self) -> None:
        self._replace_state(sort=[])
        if self._on_sort_change is not None:
            self._on_sort_change([])

    def reset_state(self) -> None:
        self._state = self._initial_state()
        if self._on_sort_change is not None:
            self._on_sort_change([])
        if self._on_filter_change is not None:
            self._on_filter_change(None)

    def _replace_state(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)

    def _initial_state(self) -> QueryState:
        return QueryState(skip=0, take=self.options.default_page_size, sort=[], filter=None)

    # -- results -------------------------------------------------------------

    def result(self) -> DataResult:
        """Visible slice for the current rows and state, memoized on both."""
        cached = self._cache
        if (
            cached is not None
            and cached.rows_version == self._rows_version
            and cached.state == self._state
            and cached.options == self.options
        ):
            return cached.result

        result = process(
            self.rows,
            self._state,
            sorting=self.options.show_sort,
            filtering=self.options.show_filter,
            paging=self.options.enable_paging,
        )
        self._cache = _CachedResult(self._rows_version, self._state, self.options, result)
        return result
