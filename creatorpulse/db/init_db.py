"""Create all tables: `python -m creatorpulse.db.init_db`."""

from __future__ import annotations

import asyncio
import logging

from creatorpulse.core.logging import configure_logging
from creatorpulse.db import models  # noqa: F401  (registers tables on Base.metadata)
from creatorpulse.db.base import Base
from creatorpulse.db.session import get_engine

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    engine = get_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Created tables: %s", ", ".join(sorted(Base.metadata.tables)))
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(create_tables())
