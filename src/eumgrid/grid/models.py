"""Wire and client models for server-described grids."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from eumgrid.config import Settings
from eumgrid.session import SessionAccessor
from eumgrid.utils import new_request_id

ColumnType = Literal["string", "number", "date", "boolean"]
TextAlign = Literal["left", "center", "right"]
ParameterValue = str | int | float

DEFAULT_GRID_USER_ID = "admin"
DEFAULT_SOURCE = "web"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # A server null falls back to the field default.
        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if value is not None}
        return data


class HeaderDescriptor(_WireModel):
    """Server metadata for one column, ordered by `seq`."""

    seq: int = 0
    band_name: str = Field(default="", alias="bandname")
    column_name: str = Field(default="", alias="columnname")
    column_format: str = Field(default="", alias="columnformat")
    column_format_number: int | None = Field(default=0, alias="columnformatnumber")
    column_type: str | None = Field(default=None, alias="comumntype")
    width: int | None = None
    footer_name: str | None = Field(default="", alias="footername")
    footer_format: str | None = Field(default=None, alias="footerformat")
    protocol_format_string: str | None = Field(default="", alias="protocolFormatString")


class FieldDescriptor(_WireModel):
    """Field name and declared type; paired with the header at the same index."""

    name: str = ""
    type: str = "string"


class ColumnModel(BaseModel):
    """Client column derived from one header/field descriptor pair."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field: str
    title: str
    type: ColumnType = "string"
    width: str | None = None
    format: str | None = None
    filterable: bool = True
    sortable: bool = True
    hidden: bool = False
    text_align: TextAlign = Field(default="left", alias="textAlign")
    class_name: str = Field(default="", alias="className")


class GridData(_WireModel):
    headers: list[HeaderDescriptor] = Field(default_factory=list)
    datafield: list[FieldDescriptor] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)


class GridResponse(_WireModel):
    status: int
    message: str = ""
    data: GridData | None = None
    timestamp: float | str = 0
    metadata: dict[str, Any] = Field(default_factory=dict)


class GridRequestMetadata(_WireModel):
    source: str = DEFAULT_SOURCE
    request_id: str = Field(alias="requestId")
    user_id: str = Field(alias="userId")


class GridRequest(_WireModel):
    """Body of a grid data call; `call_id` names the server-side procedure."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    call_id: str = Field(alias="callId")
    parameters: list[ParameterValue] | None = None
    parameter_types: list[str] | None = Field(default=None, alias="parametertype")
    metadata: GridRequestMetadata
    timestamp: str

    def to_wire(self) -> dict[str, Any]:
        body = self.model_dump(by_alias=True)
        body["parameters"] = body["parameters"] or []
        body["parametertype"] = body["parametertype"] or []
        return body


def generate_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_metadata(user_id: str = DEFAULT_GRID_USER_ID, *, source: str = DEFAULT_SOURCE) -> GridRequestMetadata:
    return GridRequestMetadata(source=source, request_id=new_request_id(), user_id=user_id)


def create_grid_request(
    call_id: str,
    parameters: Sequence[ParameterValue] | None = None,
    parameter_types: Sequence[str] | None = None,
    user_id: str = DEFAULT_GRID_USER_ID,
    *,
    source: str = DEFAULT_SOURCE,
) -> GridRequest:
    return GridRequest(
        call_id=call_id,
        parameters=list(parameters) if parameters is not None else None,
        parameter_types=list(parameter_types) if parameter_types is not None else None,
        metadata=default_metadata(user_id, source=source),
        timestamp=generate_timestamp(),
    )


class GridRequestFactory:
    """Build grid requests stamped with the signed-in user, or `admin`."""

    def __init__(
        self,
        session: SessionAccessor,
        *,
        fallback_user_id: str = DEFAULT_GRID_USER_ID,
        source: str = DEFAULT_SOURCE,
    ) -> None:
        self._session = session
        self._fallback_user_id = fallback_user_id
        self._source = source

    @classmethod
    def from_settings(cls, session: SessionAccessor, settings: Settings) -> GridRequestFactory:
        return cls(session, fallback_user_id=settings.default_grid_user_id, source=settings.grid_source)

    def __call__(
        self,
        call_id: str,
        parameters: Sequence[ParameterValue] | None = None,
        parameter_types: Sequence[str] | None = None,
    ) -> GridRequest:
        user_id = self._session.snapshot().user_id or self._fallback_user_id
        return create_grid_request(call_id, parameters, parameter_types, user_id, source=self._source)
