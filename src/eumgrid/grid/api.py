"""Grid data call against the stored-procedure endpoint."""

from __future__ import annotations

import time

from loguru import logger

from eumgrid.api.transport import AuthenticatedTransport
from eumgrid.errors import EumGridError, RequestValidationError
from eumgrid.logging_utils import bind_request_id

from .models import GridData, GridRequest, GridResponse

GRID_DATA_PATH = "/eum/stp/getGridData"


def validate_grid_request(request: GridRequest) -> None:
    if not request.call_id or not request.call_id.strip():
        raise RequestValidationError("callId is required")


def failed_grid_response(message: str, *, status: int = 500) -> GridResponse:
    return GridResponse(
        status=status,
        message=message,
        data=GridData(),
        timestamp=time.time(),
        metadata={},
    )


async def fetch_grid_data(transport: AuthenticatedTransport, request: GridRequest) -> GridResponse:
    """Fetch one server-described grid.

    Raises `RequestValidationError` before any network call when `callId` is
    missing. Every other failure comes back as a status-500 response with empty
    headers, datafield and rows.
    """
    validate_grid_request(request)
    body = request.to_wire()
    path = transport.settings.grid_data_path or GRID_DATA_PATH

    with bind_request_id(request.metadata.request_id):
        logger.info(
            "grid.fetch.start path={} call_id={} parameters={} user_id={}",
            path,
            request.call_id,
            len(body["parameters"]),
            request.metadata.user_id,
        )
        try:
            response = await transport.post(path, body)
            result = GridResponse.model_validate(response.json())
        except EumGridError as exc:
            message = getattr(exc, "message", None) or str(exc) or "Failed to load grid data"
            logger.error("grid.fetch.failed path={} call_id={} error={}", path, request.call_id, message)
            return failed_grid_response(message)
        except ValueError as exc:
            logger.error("grid.fetch.malformed path={} call_id={} error={}", path, request.call_id, exc)
            return failed_grid_response(f"Malformed grid response: {exc}")
        except Exception as exc:
            logger.exception("grid.fetch.error path={} call_id={}", path, request.call_id)
            return failed_grid_response(str(exc) or "Failed to load grid data")

        data = result.data or GridData()
        logger.info(
            "grid.fetch.success status={} message={} rows={} columns={}",
            result.status,
            result.message,
            len(data.rows),
            len(data.headers),
        )
        return result
