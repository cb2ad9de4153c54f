from __future__ import annotations

import asyncio

import pytest

from surreal_crud.config import DEFAULT_CONFIG, DbConfig
from surreal_crud.errors import NotInitializedError
from surreal_crud.infrastructure.connection import ConnectionManager, connect
from tests.fakes import FakeSurreal


class _CountingFactory:
    def __init__(self) -> None:
        self.clients: list[FakeSurreal] = []

    def __call__(self, url: str) -> FakeSurreal:
        client = FakeSurreal(url)
        self.clients.append(client)
        return client


class _FailingSignin(FakeSurreal):
    async def signin(self, credentials):
        raise PermissionError("bad credentials")


@pytest.mark.asyncio
async def test_connect_signs_in_and_selects_scope(fake_config: DbConfig) -> None:
    client = await connect(fake_config, FakeSurreal)

    assert client.url == "mem://fake"
    assert client.connected is True
    assert client.credentials == {"username": "tester", "password": "secret"}
    assert client.scope == ("unit", "crud")


@pytest.mark.asyncio
async def test_connect_closes_client_on_failure(fake_config: DbConfig) -> None:
    created: list[FakeSurreal] = []

    def factory(url: str) -> FakeSurreal:
        created.append(_FailingSignin(url))
        return created[-1]

    with pytest.raises(PermissionError):
        await connect(fake_config, factory)
    assert created[0].closed is True


def test_get_before_init_raises() -> None:
    manager = ConnectionManager(client_factory=FakeSurreal)

    assert manager.is_initialized is False
    assert manager.config == DEFAULT_CONFIG
    with pytest.raises(NotInitializedError):
        manager.get()


@pytest.mark.asyncio
async def test_init_is_idempotent(fake_config: DbConfig) -> None:
    factory = _CountingFactory()
    manager = ConnectionManager(fake_config, client_factory=factory)

    first = await manager.init()
    second = await manager.init(DbConfig(url="mem://other"))

    assert first is second
    assert manager.get() is first
    assert len(factory.clients) == 1
    assert manager.config.url == "mem://fake"


@pytest.mark.asyncio
async def test_concurrent_init_connects_once(fake_config: DbConfig) -> None:
    factory = _CountingFactory()
    manager = ConnectionManager(fake_config, client_factory=factory)

    handles = await asyncio.gather(*(manager.init() for _ in range(5)))

    assert len(factory.clients) == 1
    assert all(handle is handles[0] for handle in handles)


@pytest.mark.asyncio
async def test_failed_init_leaves_manager_uninitialized(fake_config: DbConfig) -> None:
    manager = ConnectionManager(fake_config, client_factory=_FailingSignin)

    with pytest.raises(PermissionError):
        await manager.init()

    assert manager.is_initialized is False
    with pytest.raises(NotInitializedError):
        manager.get()


@pytest.mark.asyncio
async def test_close_resets_state_and_is_safe_twice(fake_config: DbConfig) -> None:
    factory = _CountingFactory()
    manager = ConnectionManager(fake_config, client_factory=factory)
    await manager.init()

    await manager.close()
    await manager.close()

    assert factory.clients[0].closed is True
    assert manager.is_initialized is False
    with pytest.raises(NotInitializedError):
        manager.get()


@pytest.mark.asyncio
async def test_init_after_close_reconnects(fake_config: DbConfig) -> None:
    factory = _CountingFactory()
    manager = ConnectionManager(fake_config, client_factory=factory)
    await manager.init()
    await manager.close()

    handle = await manager.init()

    assert handle is factory.clients[1]
    assert len(factory.clients) == 2


@pytest.mark.asyncio
async def test_async_context_manager_opens_and_closes(fake_config: DbConfig) -> None:
    factory = _CountingFactory()

    async with ConnectionManager(fake_config, client_factory=factory) as manager:
        assert manager.get() is factory.clients[0]

    assert factory.clients[0].closed is True
    assert manager.is_initialized is False
