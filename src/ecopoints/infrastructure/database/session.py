"""Database session management."""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from ecopoints.core.config import get_settings


def create_async_db_engine(url: str | None = None, **overrides: Any) -> AsyncEngine:
    """Create asynchronous database engine.

    @param url - Database URL (defaults to the configured one)
    @param overrides - Extra keyword arguments for create_async_engine
    @returns Async engine
    """
    settings = get_settings()
    url = url or settings.database_url

    options: dict[str, Any] = {"echo": settings.debug}
    if url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them
        options["poolclass"] = NullPool
    else:
        options.update(
            pool_size=10,
            max_overflow=20,
            pool_recycle=1800,
            pool_pre_ping=True,
        )
    options.update(overrides)
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory bound to an engine.

    @param engine - Async engine
    @returns Session factory
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


# Create engine
async_engine = create_async_db_engine()

# Session factory
AsyncSessionLocal = create_session_factory(async_engine)
