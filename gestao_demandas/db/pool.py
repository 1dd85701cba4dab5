"""Shared asyncpg pool for the PostgreSQL stores.

One pool is opened at startup and handed to the demanda, audit and backup
index stores; it is closed on shutdown after the final snapshot.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

from gestao_demandas.config.models.storage import PostgresConfig
from gestao_demandas.db.errors import ConnectionError
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)


def resolve_dsn(configured: str | None = None) -> str:
    """Pick the connection string.

    Order: explicit value, ``DATABASE_URL``, then a DSN assembled from the
    ``POSTGRES_*`` variables with local defaults.
    """
    if configured:
        return configured
    if url := os.environ.get("DATABASE_URL"):
        return url
    env = os.environ.get
    return (
        f"postgresql://{env('POSTGRES_USER', 'demandas')}:{env('POSTGRES_PASSWORD', 'demandas')}"
        f"@{env('POSTGRES_HOST', 'localhost')}:{env('POSTGRES_PORT', '5432')}"
        f"/{env('POSTGRES_DB', 'demandas')}"
    )


class PostgresPool:
    """Lazily connected asyncpg pool.

    Usage:
        pool = PostgresPool.from_config(settings.storage.postgres)
        await pool.connect()
        async with pool.acquire() as conn:
            total = await conn.fetchval("SELECT COUNT(*) FROM demandas")
        await pool.close()
    """

    def __init__(
        self,
        dsn: str | None = None,
        min_size: int = 2,
        max_size: int = 10,
        max_inactive_connection_lifetime: float = 300.0,
        command_timeout: float = 60.0,
    ) -> None:
        self._dsn = resolve_dsn(dsn)
        self._pool_kwargs = {
            "min_size": min_size,
            "max_size": max_size,
            "max_inactive_connection_lifetime": max_inactive_connection_lifetime,
            "command_timeout": command_timeout,
        }
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_config(cls, config: PostgresConfig) -> "PostgresPool":
        """Build an unconnected pool from the storage settings."""
        return cls(
            dsn=config.dsn,
            min_size=config.min_pool_size,
            max_size=config.max_pool_size,
            max_inactive_connection_lifetime=config.max_inactive_connection_lifetime,
            command_timeout=config.command_timeout,
        )

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Open the pool; a no-op when already open.

        Raises:
            ConnectionError: If the server is unreachable or rejects the login
        """
        if self._pool is not None:
            return
        try:
            self._pool = await asyncpg.create_pool(dsn=self._dsn, **self._pool_kwargs)
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_pool_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}", cause=e) from e
        logger.info(
            "postgres_pool_connected",
            min_size=self._pool_kwargs["min_size"],
            max_size=self._pool_kwargs["max_size"],
        )

    async def close(self) -> None:
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.close()
        logger.info("postgres_pool_closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Borrow a connection, connecting the pool first if needed."""
        await self.connect()
        async with self._pool.acquire() as connection:
            yield connection

    async def health_check(self) -> bool:
        """True when an open pool answers ``SELECT 1``."""
        if self._pool is None:
            return False
        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except (OSError, asyncpg.PostgresError) as e:
            logger.warning("postgres_health_check_failed", error=str(e))
            return False
        return True
