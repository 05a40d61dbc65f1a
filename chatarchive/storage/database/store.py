"""
Pooled store adapter.

A Store wraps one asyncpg connection pool and exposes the four calls the
services need: execute, insert, fetch and fetchrow. Driver exceptions are
classified into StoreConnectionError (the store could not be reached in
time) and StatementError (the store rejected the statement).
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import asyncpg

from ...config.settings import StoreConfig
from ...utils.logging import log_event
from .utils import (
    StatementError,
    StatementResult,
    StoreConnectionError,
    build_ssl_context,
    parse_affected_count,
    record_to_dict,
    records_to_list,
)


class Store:
    """
    Thin wrapper around a bounded asyncpg pool for one relational store.

    Every call borrows a connection for a single statement and returns it
    to the pool; there are no multi-statement transactions. The pool's
    ``max_size`` caps concurrent in-flight statements and ``acquire_timeout``
    bounds how long a caller waits for a free connection.

    Usage:
        store = await Store.connect(settings.text_store_config())
        result = await store.execute("DELETE FROM messages WHERE id = $1", 7)
        await store.close()
    """

    def __init__(self, name: str, pool: asyncpg.Pool, acquire_timeout: float = 10.0):
        """
        Initialize the adapter around an existing pool.

        Args:
            name: Logical store name ("text" or "files")
            pool: asyncpg connection pool
            acquire_timeout: Seconds to wait for a pooled connection
        """
        self.name = name
        self.pool = pool
        self.acquire_timeout = acquire_timeout

    @classmethod
    async def connect(cls, config: StoreConfig) -> "Store":
        """
        Create the connection pool for a store.

        Args:
            config: Connection parameters

        Returns:
            Connected Store

        Raises:
            StoreConnectionError: If the pool cannot be created
            ValueError: If the configured CA bundle is invalid
        """
        ssl_context = build_ssl_context(config.ca_b64)

        try:
            pool = await asyncpg.create_pool(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password,
                database=config.database,
                ssl=ssl_context,
                min_size=config.min_size,
                max_size=config.max_size,
                timeout=config.acquire_timeout,
                command_timeout=config.command_timeout,
                server_settings={
                    "application_name": f"chatarchive-{config.name}",
                    "timezone": "UTC",
                },
            )
        except asyncpg.InvalidCatalogNameError:
            raise StoreConnectionError(
                f"Database '{config.database}' does not exist on the "
                f"{config.name} store",
                store=config.name,
            ) from None
        except asyncpg.InvalidPasswordError:
            raise StoreConnectionError(
                f"Invalid credentials for the {config.name} store",
                store=config.name,
            ) from None
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError) as e:
            raise StoreConnectionError(
                f"Failed to connect to the {config.name} store: {e}",
                store=config.name,
            ) from e

        log_event(
            "store_connected",
            {
                "store": config.name,
                "host": config.host,
                "port": config.port,
                "database": config.database,
                "tls": ssl_context is not None,
                "pool_max_size": config.max_size,
            },
        )

        return cls(config.name, pool, acquire_timeout=config.acquire_timeout)

    async def _run(self, method: str, query: str, *args: Any) -> Any:
        try:
            async with self.pool.acquire(timeout=self.acquire_timeout) as conn:
                return await getattr(conn, method)(query, *args)
        except asyncio.TimeoutError as e:
            raise StoreConnectionError(
                f"Timed out waiting on the {self.name} store",
                store=self.name,
            ) from e
        except (OSError, asyncpg.PostgresConnectionError, asyncpg.InterfaceError) as e:
            raise StoreConnectionError(str(e), store=self.name) from e
        except asyncpg.PostgresError as e:
            raise StatementError(str(e), store=self.name) from e

    async def execute(self, query: str, *args: Any) -> StatementResult:
        """
        Run a mutating statement.

        Returns:
            StatementResult with the affected row count
        """
        status = await self._run("execute", query, *args)
        return StatementResult(affected_rows=parse_affected_count(status))

    async def insert(self, query: str, *args: Any) -> StatementResult:
        """
        Run an INSERT ... RETURNING id statement.

        Returns:
            StatementResult with the store-generated id
        """
        inserted_id = await self._run("fetchval", query, *args)
        if inserted_id is None:
            raise StatementError("Insert returned no id", store=self.name)
        return StatementResult(affected_rows=1, inserted_id=int(inserted_id))

    async def fetch(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        """Run a query and return every row as a dict."""
        records = await self._run("fetch", query, *args)
        return records_to_list(records)

    async def fetchrow(self, query: str, *args: Any) -> Optional[Dict[str, Any]]:
        """Run a query and return the first row as a dict, or None."""
        record = await self._run("fetchrow", query, *args)
        return record_to_dict(record) if record is not None else None

    async def ping(self) -> bool:
        """Check that the store answers a trivial query."""
        return await self._run("fetchval", "SELECT 1") == 1

    async def close(self) -> None:
        """Release every pooled connection."""
        try:
            await self.pool.close()
        finally:
            log_event("store_closed", {"store": self.name}, level=logging.DEBUG)
