"""Authenticated HTTP transport with transparent credential renewal."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Self

import httpx
from loguru import logger

from eumgrid.config import Settings
from eumgrid.errors import ApiError, NetworkError
from eumgrid.session import SessionAccessor

from .coordinator import TokenRefreshCoordinator, TokenRenewer

DEFAULT_HEADERS = {"Content-Type": "application/json"}


@dataclass
class OutboundRequest:
    """One logical call; `retried` is set once it has been resent after renewal."""

    method: str
    path: str
    json: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    retried: bool = False


def api_error_from_response(response: httpx.Response) -> ApiError:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    body = payload if isinstance(payload, dict) else {}
    message = body.get("message") or response.reason_phrase or "An error occurred"
    return ApiError(
        str(message),
        status=response.status_code,
        code=body.get("code"),
        details=payload,
    )


class AuthenticatedTransport:
    """Wrap every outbound call with the current bearer credential.

    A 401 answer hands control to the shared `TokenRefreshCoordinator` and the
    original request is resent exactly once with the renewed credential.
    """

    def __init__(
        self,
        session: SessionAccessor,
        *,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        renew: TokenRenewer | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.session = session
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=httpx.Timeout(self.settings.timeout_seconds),
            headers=DEFAULT_HEADERS,
        )
        self.coordinator = TokenRefreshCoordinator(session, renew or self.refresh_access_token)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post(self, path: str, json: Any = None, *, headers: dict[str, str] | None = None) -> httpx.Response:
        return await self.request("POST", path, json=json, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one call, renewing the credential at most once on 401.

        Raises:
            ApiError: The server answered with a non-2xx status.
            NetworkError: The call timed out or the connection failed.
            SessionTerminatedError: Renewal failed and the session was cleared.
        """
        outbound = OutboundRequest(method.upper(), path, json, dict(headers or {}))
        token = self.coordinator.acquire_token()
        response = await self._send(outbound, token)

        if self._should_renew(outbound, response):
            outbound.retried = True
            token = await self.coordinator.report_expired(token)
            logger.info("api.retry path={}", outbound.path)
            response = await self._send(outbound, token)

        if response.is_error:
            raise api_error_from_response(response)
        return response

    async def refresh_access_token(self) -> str:
        """Renew the bearer credential using the out-of-band refresh cookie."""
        try:
            response = await self._client.post(self.settings.refresh_path, json={})
        except httpx.HTTPError as exc:
            raise NetworkError(f"Token refresh failed: {exc}") from exc
        if response.is_error:
            raise api_error_from_response(response)
        payload = response.json()
        access_token = payload.get("accessToken") if isinstance(payload, dict) else None
        if not access_token:
            raise ApiError("Refresh response carried no access token", status=response.status_code, details=payload)
        return str(access_token)

    def _should_renew(self, outbound: OutboundRequest, response: httpx.Response) -> bool:
        return (
            response.status_code == httpx.codes.UNAUTHORIZED
            and not outbound.retried
            and outbound.path not in self.settings.no_refresh_paths
        )

    async def _send(self, outbound: OutboundRequest, token: str | None) -> httpx.Response:
        headers = dict(outbound.headers)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        request_id = outbound.json.get("requestId", "-") if isinstance(outbound.json, dict) else "-"

        started = time.perf_counter()
        try:
            response = await self._client.request(outbound.method, outbound.path, json=outbound.json, headers=headers)
        except httpx.TimeoutException as exc:
            logger.error(
                "api.call.timeout path={} duration_ms={} request_id={}",
                outbound.path,
                _elapsed_ms(started),
                request_id,
            )
            raise NetworkError(f"Request to {outbound.path} timed out") from exc
        except httpx.TransportError as exc:
            logger.error(
                "api.call.network_error path={} error={} duration_ms={} request_id={}",
                outbound.path,
                exc,
                _elapsed_ms(started),
                request_id,
            )
            raise NetworkError(f"Request to {outbound.path} failed: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error(
                "api.call.protocol_error path={} error={} duration_ms={} request_id={}",
                outbound.path,
                exc,
                _elapsed_ms(started),
                request_id,
            )
            raise NetworkError(f"Request to {outbound.path} failed: {exc}") from exc

        log = logger.warning if response.is_error else logger.debug
        log(
            "api.call.response path={} status={} retried={} duration_ms={} request_id={}",
            outbound.path,
            response.status_code,
            outbound.retried,
            _elapsed_ms(started),
            request_id,
        )
        return response


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
