"""Login and logout against the auth endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from eumgrid.errors import EumGridError, RequestValidationError
from eumgrid.session import InMemorySessionStore, UserInfo

from .transport import AuthenticatedTransport


class LoginResponse(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    user_info: UserInfo | None = Field(default=None, alias="userInfo")


class AuthService:
    """Sign in and out, keeping the session store in step with the server."""

    def __init__(self, transport: AuthenticatedTransport, store: InMemorySessionStore) -> None:
        self.transport = transport
        self.store = store

    async def login(self, credentials: Mapping[str, Any]) -> LoginResponse:
        if not credentials:
            raise RequestValidationError("credentials are required")
        response = await self.transport.post(self.transport.settings.login_path, dict(credentials))
        login = LoginResponse.model_validate(response.json())
        self.store.sign_in(login.access_token, login.user_info)
        logger.info("auth.login.success user_id={}", login.user_info.user_id if login.user_info else "-")
        return login

    async def logout(self) -> None:
        """Best-effort server logout; the local session is cleared regardless."""
        try:
            if self.store.snapshot().access_token:
                await self.transport.post(self.transport.settings.logout_path, {})
        except EumGridError as exc:
            logger.error("auth.logout.failed error={}", exc)
        finally:
            self.store.clear()
