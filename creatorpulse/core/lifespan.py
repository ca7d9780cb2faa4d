from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from creatorpulse.core.config import settings
from creatorpulse.jobs.scheduler import build_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """FastAPI lifespan context manager for startup/shutdown events."""
    session_maker: async_sessionmaker[AsyncSession] = app.state.session_maker
    engine: AsyncEngine | None = getattr(app.state, "engine", None)
    scheduler: AsyncIOScheduler | None = None
    try:
        # Startup
        if settings.environment != "test":
            await verify_database_connection(session_maker)
        if settings.scheduler_enabled:
            scheduler = build_scheduler(session_maker, app.state.services)
            scheduler.start()
            logger.info("Scheduler started")
        yield

        # Shutdown
    finally:
        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=False)
        if engine is not None:
            await engine.dispose()


async def verify_database_connection(session_maker: async_sessionmaker[AsyncSession]) -> None:
    """Verify database connectivity at startup. Raises if connection fails."""
    try:
        async with session_maker() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        raise RuntimeError(f"Failed to connect to database: {e}") from e
