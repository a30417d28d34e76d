"""Database configuration and session management."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

import config

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    """Backend-specific engine options."""
    if database_url.startswith("sqlite"):
        # aiosqlite runs the connection on its own thread
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


# Create async engine
engine = create_async_engine(
    config.settings.DATABASE_URL,
    echo=False,  # Set to True for SQL query logging
    **_engine_options(config.settings.DATABASE_URL),
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncSession:
    """
    Dependency function to get database session.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block of work as a single unit.

    Commits when the block exits normally. Any exception raised inside the
    block rolls back every write made in it and is re-raised to the caller.

    Args:
        session: Database session

    Yields:
        AsyncSession: The same session, for convenience
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        logger.debug("Rolling back transaction")
        await session.rollback()
        raise


async def init_db() -> None:
    """
    Initialize database (create tables).
    This should be called on application startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """
    Close database connections.
    This should be called on application shutdown.
    """
    await engine.dispose()
