"""
Database engine and session factory.

Sessions are short lived: one per externally triggered operation.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from affiliate.config.settings import settings


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create async engine.

    In-memory SQLite gets a StaticPool so every session sees the same
    database.

    Args:
        database_url: Override for settings.database_url

    Returns:
        AsyncEngine
    """
    url = database_url or settings.database_url

    in_memory = url == "sqlite+aiosqlite://" or ":memory:" in url
    if url.startswith("sqlite+aiosqlite://") and in_memory:
        return create_async_engine(
            url,
            echo=settings.database_echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        url,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )


def create_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to the engine."""
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
