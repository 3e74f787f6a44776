"""Single-flight credential renewal shared by every transport call site."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import TypeAlias

from loguru import logger

from eumgrid.errors import SessionTerminatedError
from eumgrid.session import SessionAccessor, session_terminated

TokenRenewer: TypeAlias = Callable[[], Awaitable[str]]


class RefreshState(StrEnum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class TokenRefreshCoordinator:
    """Guarantee at most one in-flight renewal and replay everyone who waited on it.

    The first caller of `report_expired` runs the renewer; callers arriving while
    it runs are queued and settled in arrival order with the same outcome.
    """

    def __init__(self, session: SessionAccessor, renew: TokenRenewer) -> None:
        self._session = session
        self._renew = renew
        self._state = RefreshState.IDLE
        self._waiters: deque[asyncio.Future[str]] = deque()
        self.renewals = 0

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending_waiters(self) -> int:
        return len(self._waiters)

    def acquire_token(self) -> str | None:
        return self._session.snapshot().access_token

    async def report_expired(self, failed_token: str | None = None) -> str:
        """Return a fresh credential after an authorization failure.

        Args:
            failed_token: Credential the failing request was sent with. When the
                session already holds a different credential, that expiry was
                renewed by someone else and the current one is returned as is.

        Raises:
            SessionTerminatedError: Renewal failed; the session has been cleared.
        """
        if self._state is RefreshState.REFRESHING:
            waiter: asyncio.Future[str] = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            logger.debug("auth.refresh.queued waiters={}", len(self._waiters))
            return await waiter

        current = self.acquire_token()
        if failed_token is not None:
            if current is None:
                # The episode for `failed_token` already ended in termination.
                raise SessionTerminatedError("Session expired, please sign in again")
            if current != failed_token:
                return current

        self._state = RefreshState.REFRESHING
        self.renewals += 1
        logger.info("auth.refresh.start")
        try:
            token = await self._renew()
        except Exception as exc:
            error = SessionTerminatedError("Session expired, please sign in again")
            error.__cause__ = exc
            self._settle(error=error)
            self._session.clear()
            logger.error("auth.refresh.failed error={}", exc)
            session_terminated.send(self, error=error)
            raise error from exc
        else:
            self._session.set_access_token(token)
            self._settle(token=token)
            logger.info("auth.refresh.done")
            return token
        finally:
            self._state = RefreshState.IDLE
            # Only reached with waiters left when the renewer was cancelled.
            while self._waiters:
                self._waiters.popleft().cancel()

    def _settle(self, *, token: str | None = None, error: BaseException | None = None) -> None:
        waiters, self._waiters = self._waiters, deque()
        for waiter in waiters:
            if waiter.done():
                continue
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(token)  # type: ignore[arg-type]
