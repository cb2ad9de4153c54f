"""
SurrealDB connection management for surreal-crud.

A `ConnectionManager` owns exactly one client handle. It is constructed at
startup, initialised explicitly, handed to every `RecordService` that needs
the database, and closed explicitly when the application shuts down. There is
no retry and no pooling: one handle is shared by every concurrent operation.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

from surrealdb import AsyncSurreal

from surreal_crud.config import DEFAULT_CONFIG, DbConfig
from surreal_crud.errors import NotInitializedError
from surreal_crud.utils.logging import get_logger

log = get_logger(__name__)

ClientFactory = Callable[[str], Any]


async def connect(config: DbConfig, client_factory: ClientFactory = AsyncSurreal) -> Any:
    """
    Open a fresh, authenticated client scoped to the configured namespace/database.

    Parameters
    ----------
    config : DbConfig
        Endpoint, namespace, database and credentials.
    client_factory : callable
        Builds an unconnected client from the endpoint URL. Defaults to the
        SDK's `AsyncSurreal`.

    Raises
    ------
    Exception
        Whatever the client raised; the half-open client is closed first.
    """
    client = client_factory(config.url)
    try:
        await client.connect()
        await client.signin({"username": config.username, "password": config.password})
        await client.use(config.namespace, config.database)
    except Exception as exc:
        log.error(
            "Failed to connect to SurrealDB: %s",
            exc,
            extra={"url": config.url, "namespace": config.namespace},
        )
        await client.close()
        raise
    return client


class ConnectionManager:
    """
    Explicit owner of the process-wide database handle.

    Example
    -------
        manager = ConnectionManager(get_settings().db_config())
        await manager.init()
        users = RecordService("user", manager)
        ...
        await manager.close()
    """

    def __init__(
        self,
        config: Optional[DbConfig] = None,
        client_factory: ClientFactory = AsyncSurreal,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self._client_factory = client_factory
        self._client: Any = None
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    async def init(self, config: Optional[DbConfig] = None) -> Any:
        """
        Connect if not yet connected and return the handle.

        Calling `init` on an initialised manager returns the existing handle
        without reconnecting; `config` is then ignored.
        """
        async with self._lock:
            if self._client is not None:
                return self._client
            if config is not None:
                self.config = config
            try:
                self._client = await connect(self.config, self._client_factory)
            except Exception:
                self._client = None
                raise
            log.info(
                "SurrealDB connection established",
                extra={
                    "url": self.config.url,
                    "namespace": self.config.namespace,
                    "database": self.config.database,
                },
            )
            return self._client

    def get(self) -> Any:
        """
        Return the live handle.

        Raises
        ------
        NotInitializedError
            If `init` was never called, failed, or the manager was closed.
        """
        if self._client is None:
            raise NotInitializedError()
        return self._client

    async def close(self) -> None:
        """Release the handle. Safe to call when already closed."""
        async with self._lock:
            client, self._client = self._client, None
            if client is not None:
                await client.close()
                log.info("SurrealDB connection closed", extra={"url": self.config.url})

    async def __aenter__(self) -> "ConnectionManager":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        await self.close()


__all__ = ["ClientFactory", "ConnectionManager", "connect"]
