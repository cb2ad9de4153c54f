"""
Pytest configuration for surreal-crud.

Provides fixtures for:
- An in-memory fake SurrealDB client and a connection manager wired to it
- Record services and repositories bound to that manager
- Settings and a live connection for integration tests
"""

from __future__ import annotations

import os
import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from surreal_crud.config import DbConfig, Settings
from surreal_crud.infrastructure.connection import ConnectionManager
from surreal_crud.models import Repository, User
from surreal_crud.service import RecordService
from tests.fakes import FakeSurreal


@pytest.fixture
def fake_client() -> FakeSurreal:
    return FakeSurreal()


@pytest.fixture
def fake_config() -> DbConfig:
    return DbConfig(
        url="mem://fake",
        namespace="unit",
        database="crud",
        username="tester",
        password="secret",
    )


@pytest_asyncio.fixture
async def manager(
    fake_client: FakeSurreal, fake_config: DbConfig
) -> AsyncGenerator[ConnectionManager, None]:
    """
    Connection manager initialised against the fake client.
    """
    conn = ConnectionManager(fake_config, client_factory=lambda url: fake_client)
    await conn.init()
    try:
        yield conn
    finally:
        await conn.close()


@pytest.fixture
def users_service(manager: ConnectionManager) -> RecordService[dict]:
    return RecordService("user", manager)


@pytest.fixture
def users(manager: ConnectionManager) -> Repository[User]:
    return Repository(User, "user", manager)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        surreal_url=os.getenv("SURREAL_URL", "ws://localhost:8000/rpc"),
        surreal_namespace=os.getenv("SURREAL_NAMESPACE", "test"),
        surreal_database=os.getenv("SURREAL_DATABASE", "test"),
        surreal_username=os.getenv("SURREAL_USERNAME", "root"),
        surreal_password=os.getenv("SURREAL_PASSWORD", "root"),
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def live_manager(test_settings: Settings) -> AsyncGenerator[ConnectionManager, None]:
    """
    Connection manager against a real SurrealDB.

    Skips the test if the database is not reachable.
    """
    conn = ConnectionManager(test_settings.db_config())
    try:
        await conn.init()
    except Exception as exc:  # noqa: BLE001 - any failure means "not available"
        pytest.skip(f"SurrealDB not available for integration tests: {exc}")
    try:
        yield conn
    finally:
        await conn.close()


@pytest_asyncio.fixture
async def live_service(live_manager: ConnectionManager) -> AsyncGenerator[RecordService[dict], None]:
    """
    Service over a uniquely named scratch table, emptied after the test.
    """
    service: RecordService[dict] = RecordService(f"test_user_{uuid.uuid4().hex[:8]}", live_manager)
    try:
        yield service
    finally:
        await service.delete_all()
