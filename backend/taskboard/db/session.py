"""Database lifecycle and request-scoped sessions.

The connection pool lives in an explicit :class:`Database` handle created by
:func:`open_database` and released by :func:`close_database`. The application
keeps the handle on ``app.state.database``; nothing in the package opens a
connection on import.
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated

import structlog
from fastapi import Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.config import Settings

logger = structlog.get_logger()


@dataclass
class Database:
    """Handle to an open engine and its session factory."""

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]

    def session(self) -> AsyncSession:
        """Open a new session bound to this database."""
        return self.session_factory()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory used for every request."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def open_database(settings: Settings) -> Database:
    """Create the engine for ``settings.database_url`` and verify connectivity."""
    engine_options: dict = {"echo": settings.debug, "pool_pre_ping": True}
    if not settings.database_url.startswith("sqlite"):
        engine_options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
        )

    engine = create_async_engine(settings.database_url, **engine_options)
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))

    logger.info("database_opened", dialect=engine.dialect.name)
    return Database(engine=engine, session_factory=create_session_factory(engine))


async def close_database(database: Database) -> None:
    """Dispose of the connection pool held by ``database``."""
    await database.engine.dispose()
    logger.info("database_closed")


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session for dependency injection."""
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Type alias for dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db_session)]
