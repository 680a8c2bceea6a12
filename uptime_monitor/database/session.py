"""Database session management with async support."""

import os
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from uptime_monitor.config import load_dotenv

load_dotenv()

# Get database URL from environment or use default SQLite
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/uptime_monitor.db")


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite gets a NullPool so concurrent requests and the prober each open
    their own connection; server databases get a real queue pool.
    """
    if "sqlite" in database_url:
        pool_class = NullPool
        pool_kwargs = {}
    else:
        pool_class = AsyncAdaptedQueuePool
        pool_kwargs = {
            "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
            "pool_pre_ping": True,
            "pool_recycle": 3600,
        }

    return create_async_engine(
        database_url,
        echo=os.getenv("DB_ECHO", "false").lower() == "true",
        poolclass=pool_class,
        **pool_kwargs
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Create the session factory handed to the registry, prober and aggregator."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(DATABASE_URL)
async_session = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.

    Yields:
        AsyncSession: Database session, rolled back if the request fails
    """
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
