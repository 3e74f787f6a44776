from __future__ import annotations

from collections.abc import Awaitable, Callable

import httpx
import pytest
from typing import TypeAlias

from eumgrid.api.transport import AuthenticatedTransport
from eumgrid.config import Settings
from eumgrid.session import InMemorySessionStore, UserInfo

BASE_URL = "http://testserver/api"

Handler: TypeAlias = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]
TransportFactory: TypeAlias = Callable[[Handler], AuthenticatedTransport]


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=BASE_URL, timeout_seconds=1.0)


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore("old-token", UserInfo(user_id="u-1", user_name="Kim"))


@pytest.fixture
def make_transport(settings: Settings, store: InMemorySessionStore) -> TransportFactory:
    def _make(handler: Handler) -> AuthenticatedTransport:
        client = httpx.AsyncClient(
            base_url=BASE_URL,
            transport=httpx.MockTransport(handler),
            timeout=settings.timeout_seconds,
        )
        return AuthenticatedTransport(store, settings=settings, client=client)

    return _make
