"""Database configuration and scoped connection management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base

from crm_api.config import get_settings

Base: Any = declarative_base()


class Database:
    """Owns the async engine and its connection pool.

    Every service operation borrows exactly one connection through
    ``connection()`` and gives it back when the block exits, whichever way
    it exits.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[AsyncConnection]:
        """Yield a pooled connection inside a transaction.

        Commits when the block completes, rolls back when it raises, and
        always returns the connection to the pool.
        """
        async with self.engine.begin() as conn:
            yield conn

    async def create_all(self) -> None:
        """Create the tables declared on ``Base`` (local development and tests)."""
        # Import all models here so they are registered with Base.metadata
        from crm_api import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()


@lru_cache
def get_database() -> Database:
    """Get the process-wide database handle, created on first use."""
    settings = get_settings()
    return Database(
        settings.database_url,
        echo=settings.db_echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
