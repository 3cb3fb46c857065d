"""
Process-wide database client.

Lifecycle: initialized exactly once at application startup (`init_database`),
reused by every request (`get_database` / `get_db_session`), disposed at shutdown
(`close_database`). Nothing is created lazily on first access: a request arriving
before startup completed gets a RuntimeError instead of a half-built engine.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.database.base import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the AsyncEngine and the session factory bound to it."""

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,                  # Set to False in production
            pool_pre_ping=True,         # Enables connection health checks
        )
        # `async_sessionmaker` returns an async session factory.
        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create the tables for every model registered on Base.metadata."""
        # import models so they are registered on Base.metadata
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database.tables_created", extra={"tables": sorted(Base.metadata.tables)})

    async def dispose(self) -> None:
        await self.engine.dispose()


_database: Database | None = None


def init_database(url: str, *, echo: bool = False) -> Database:
    """
    Create the process-wide Database. Must be called once, at startup.

    Raises:
        RuntimeError: if a database is already initialized.
    """
    global _database
    if _database is not None:
        raise RuntimeError("Database already initialized; call close_database() first")
    _database = Database(url, echo=echo)
    logger.info("database.initialized", extra={"dialect": _database.engine.dialect.name})
    return _database


def get_database() -> Database:
    """Return the process-wide Database created at startup."""
    if _database is None:
        raise RuntimeError("Database not initialized; the application has not started")
    return _database


async def close_database() -> None:
    """Dispose the engine and forget the process-wide Database."""
    global _database
    if _database is None:
        return
    database, _database = _database, None
    await database.dispose()
    logger.info("database.closed")


# Dependency to get DB session
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. Yields a session and ensures it's closed after the request.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_db_session)):
            await db.execute(...)
    """
    async with get_database().sessionmaker() as session:
        yield session
