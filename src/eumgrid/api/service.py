"""Generic API call returning a normalized response envelope."""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from eumgrid.errors import EumGridError, RequestValidationError
from eumgrid.logging_utils import bind_request_id
from eumgrid.utils import new_request_id

from .transport import AuthenticatedTransport

T = TypeVar("T")


class ResponseEnvelope(BaseModel, Generic[T]):
    """Uniform wrapper around every API answer, successful or not."""

    model_config = ConfigDict(populate_by_name=True)

    status: int
    message: str
    data: T | None = None
    timestamp: float | str
    metadata: Any = None
    request_id: str | None = Field(default=None, alias="requestId")
    user_id: str | None = Field(default=None, alias="userId")
    success: bool


class ApiService:
    """Post JSON bodies augmented with caller identity and a fresh request id."""

    def __init__(self, transport: AuthenticatedTransport) -> None:
        self.transport = transport

    def build_body(self, request_body: Mapping[str, Any]) -> dict[str, Any]:
        user_id = self.transport.session.snapshot().user_id
        return {
            **request_body,
            "userId": user_id or self.transport.settings.anonymous_user_id,
            "requestId": new_request_id(),
        }

    async def call_api(self, url: str, request_body: Mapping[str, Any] | None = None) -> ResponseEnvelope[Any]:
        """POST `request_body` to `url` and wrap the outcome.

        Never raises once the call is attempted; server, network and encoding
        failures come back as an envelope with `success=False`. A missing `url`
        is rejected up front.
        """
        if not url:
            raise RequestValidationError("url is required")

        started = time.time()
        body = self.build_body(request_body or {})

        with bind_request_id(body["requestId"]):
            try:
                response = await self.transport.post(url, body)
            except Exception as exc:
                known = isinstance(exc, EumGridError)
                status = (getattr(exc, "status", None) if known else None) or 500
                message = (getattr(exc, "message", None) if known else None) or str(exc) or "An unknown error occurred"
                logger.error(
                    "api.call.failed url={} status={} message={} duration_ms={}",
                    url,
                    status,
                    message,
                    int((time.time() - started) * 1000),
                )
                return ResponseEnvelope[Any](
                    status=status,
                    message=message,
                    data=None,
                    timestamp=started,
                    request_id=body["requestId"],
                    user_id=body["userId"],
                    success=False,
                )

            payload = _json_or_empty(response)
            metadata = payload.get("metadata")
            logger.info(
                "api.call.success url={} status={} duration_ms={}",
                url,
                response.status_code,
                int((time.time() - started) * 1000),
            )
            return ResponseEnvelope[Any](
                status=response.status_code,
                message=payload.get("message") or "Success",
                data=payload.get("data") or None,
                timestamp=payload.get("timestamp") or started,
                metadata=metadata,
                request_id=metadata.get("requestId") if isinstance(metadata, dict) else None,
                success=True,
            )


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}
