"""Process-wide async engine and session factory for the configured database."""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from creatorpulse.core.config import settings

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def create_engine_for(database_url: str) -> AsyncEngine:
    """Build an engine; pool sizing applies to PostgreSQL only."""
    url = make_url(database_url)
    options: dict[str, Any] = {"echo": settings.db_echo}
    if url.get_backend_name() == "postgresql":
        options.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    return create_async_engine(url, **options)


def make_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Attributes stay loaded after commit; jobs read ids once their transaction has closed.
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def get_engine() -> AsyncEngine:
    """Return the shared engine, creating it on first use."""
    global _engine, _session_maker
    if _engine is None:
        _engine = create_engine_for(str(settings.database_url))
        _session_maker = make_session_maker(_engine)
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    get_engine()
    assert _session_maker is not None
    return _session_maker
