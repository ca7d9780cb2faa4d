from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from creatorpulse.core.config import settings
from creatorpulse.jobs.tasks import (
    ServiceRegistry,
    generate_and_send_newsletters,
    prune_old_content,
    prune_old_trends,
    refresh_content_and_trends,
)

logger = logging.getLogger(__name__)

SCHEDULER_TIMEZONE = "UTC"


def _cron(**fields: int | str) -> CronTrigger:
    return CronTrigger(timezone=SCHEDULER_TIMEZONE, **fields)


def build_scheduler(
    session_maker: async_sessionmaker[AsyncSession],
    services: ServiceRegistry,
    *,
    delivery_hour: int | None = None,
) -> AsyncIOScheduler:
    """Register the recurring jobs on a new (not yet started) scheduler."""
    hour = settings.newsletter_delivery_hour if delivery_hour is None else delivery_hour
    scheduler = AsyncIOScheduler(timezone=SCHEDULER_TIMEZONE)
    jobs = [
        (refresh_content_and_trends, _cron(hour="*/6", minute=0)),
        (generate_and_send_newsletters, _cron(hour=hour, minute=0)),
        (prune_old_content, _cron(day_of_week="sun", hour=2, minute=0)),
        (prune_old_trends, _cron(day_of_week="sun", hour=3, minute=0)),
    ]
    for func, trigger in jobs:
        scheduler.add_job(
            func,
            trigger,
            args=[session_maker, services],
            id=func.__name__,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
    logger.info("Scheduled %d jobs", len(jobs), extra={"delivery_hour": hour})
    return scheduler
