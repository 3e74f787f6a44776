"""Session accessor contract and an in-memory store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from blinker import Signal
from pydantic import BaseModel, ConfigDict, Field

session_terminated = Signal("eumgrid.session_terminated")
"""Sent once when credential renewal fails and the session is cleared."""


class UserInfo(BaseModel):
    """Identity of the signed-in user as returned by the login endpoint."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    user_id: str = Field(alias="userId")
    user_name: str = Field(default="", alias="userName")


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session at one point in time."""

    access_token: str | None = None
    user: UserInfo | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    @property
    def user_id(self) -> str | None:
        return self.user.user_id if self.user is not None else None


class SessionAccessor(Protocol):
    """What the transport and coordinator need from the session store."""

    def snapshot(self) -> SessionSnapshot: ...

    def set_access_token(self, access_token: str | None) -> None: ...

    def clear(self) -> None: ...


class InMemorySessionStore:
    """Process-local session store; durable persistence is up to the caller."""

    def __init__(self, access_token: str | None = None, user: UserInfo | None = None) -> None:
        self._state = SessionSnapshot(access_token=access_token or None, user=user)

    def snapshot(self) -> SessionSnapshot:
        return self._state

    def set_access_token(self, access_token: str | None) -> None:
        self._state = SessionSnapshot(access_token=access_token or None, user=self._state.user)

    def set_user(self, user: UserInfo | None) -> None:
        self._state = SessionSnapshot(access_token=self._state.access_token, user=user)

    def sign_in(self, access_token: str, user: UserInfo | None) -> None:
        self._state = SessionSnapshot(access_token=access_token or None, user=user)

    def clear(self) -> None:
        self._state = SessionSnapshot()
