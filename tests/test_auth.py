from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from eumgrid.api.auth import AuthService
from eumgrid.api.transport import AuthenticatedTransport
from eumgrid.errors import ApiError
from eumgrid.session import InMemorySessionStore

TransportFactory = Callable[..., AuthenticatedTransport]


@pytest.mark.asyncio
async def test_login_stores_token_and_user(make_transport: TransportFactory, store: InMemorySessionStore) -> None:
    store.clear()

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/auth/login"
        assert json.loads(request.content) == {"userId": "kim", "password": "pw"}
        return httpx.Response(
            200,
            json={"accessToken": "tok-1", "userInfo": {"userId": "kim", "userName": "Kim", "dept": "ops"}},
        )

    auth = AuthService(make_transport(handler), store)
    login = await auth.login({"userId": "kim", "password": "pw"})

    snapshot = store.snapshot()
    assert login.access_token == "tok-1"
    assert snapshot.access_token == "tok-1"
    assert snapshot.is_authenticated is True
    assert snapshot.user_id == "kim"
    assert snapshot.user is not None
    assert snapshot.user.model_extra == {"dept": "ops"}


@pytest.mark.asyncio
async def test_rejected_login_does_not_attempt_renewal(
    make_transport: TransportFactory, store: InMemorySessionStore
) -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(401, json={"message": "bad credentials"})

    auth = AuthService(make_transport(handler), store)

    with pytest.raises(ApiError) as exc_info:
        await auth.login({"userId": "kim", "password": "wrong"})

    assert exc_info.value.message == "bad credentials"
    assert paths == ["/api/auth/login"]


@pytest.mark.asyncio
async def test_logout_notifies_server_and_clears(make_transport: TransportFactory, store: InMemorySessionStore) -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={})

    auth = AuthService(make_transport(handler), store)
    await auth.logout()

    assert paths == ["/api/auth/logout"]
    assert store.snapshot().is_authenticated is False


@pytest.mark.asyncio
async def test_logout_failure_is_swallowed(make_transport: TransportFactory, store: InMemorySessionStore) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "down"})

    auth = AuthService(make_transport(handler), store)
    await auth.logout()

    assert store.snapshot().access_token is None


@pytest.mark.asyncio
async def test_logout_without_token_skips_server(make_transport: TransportFactory, store: InMemorySessionStore) -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={})

    store.clear()
    auth = AuthService(make_transport(handler), store)
    await auth.logout()

    assert paths == []
