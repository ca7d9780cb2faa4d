"""Batch jobs run by the scheduler. Each user is handled in its own session and transaction."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from creatorpulse.core.results import BatchReport, run_sequentially
from creatorpulse.db.models.user import User
from creatorpulse.services.content_service import ContentService
from creatorpulse.services.newsletter_service import NewsletterService
from creatorpulse.services.trend_service import TrendService

logger = logging.getLogger(__name__)

ServiceRegistry = Mapping[str, Callable[[AsyncSession], Any]]

CONTENT_RETENTION_DAYS = 30
TREND_RETENTION_DAYS = 7


async def _load_user_ids(session_maker: async_sessionmaker[AsyncSession]) -> list[int]:
    async with session_maker() as session:
        result = await session.execute(select(User.id).order_by(User.id))
        return list(result.scalars().all())


def _log_summary(job: str, report: BatchReport[Any, Any]) -> None:
    logger.info(
        "%s finished: %d succeeded, %d failed",
        job,
        len(report.succeeded),
        len(report.failed),
        extra={"job": job, "total": report.total},
    )


async def refresh_content_and_trends(
    session_maker: async_sessionmaker[AsyncSession], services: ServiceRegistry
) -> BatchReport[int, int]:
    """Fetch every user's sources, then derive fresh trends. Returns trends stored per user."""

    async def refresh_user(user_id: int) -> int:
        async with session_maker() as session, session.begin():
            content_service: ContentService = services["content_service"](session)
            trend_service: TrendService = services["trend_service"](session)
            await content_service.fetch_all_user_content(user_id)
            trends = await trend_service.fetch_trends(user_id)
        return len(trends)

    report = await run_sequentially(
        await _load_user_ids(session_maker), refresh_user, label="Content refresh"
    )
    _log_summary("Content refresh", report)
    return report


async def generate_and_send_newsletters(
    session_maker: async_sessionmaker[AsyncSession], services: ServiceRegistry
) -> BatchReport[int, bool]:
    """Draft and email a newsletter for every user. The draft is committed before sending."""

    async def deliver(user_id: int) -> bool:
        async with session_maker() as session, session.begin():
            newsletter_service: NewsletterService = services["newsletter_service"](session)
            newsletter = await newsletter_service.generate_newsletter(user_id)
            newsletter_id = newsletter.id

        async with session_maker() as session, session.begin():
            newsletter_service = services["newsletter_service"](session)
            return await newsletter_service.send_newsletter(newsletter_id, user_id)

    report = await run_sequentially(
        await _load_user_ids(session_maker), deliver, label="Newsletter delivery"
    )
    delivered = sum(1 for sent in report.values() if sent)
    logger.info("Newsletters delivered: %d of %d", delivered, report.total)
    _log_summary("Newsletter delivery", report)
    return report


async def prune_old_content(
    session_maker: async_sessionmaker[AsyncSession], services: ServiceRegistry
) -> int:
    async with session_maker() as session, session.begin():
        deleted = await services["content_service"](session).prune_content(CONTENT_RETENTION_DAYS)
    logger.info("Pruned %d content items older than %d days", deleted, CONTENT_RETENTION_DAYS)
    return deleted


async def prune_old_trends(
    session_maker: async_sessionmaker[AsyncSession], services: ServiceRegistry
) -> int:
    async with session_maker() as session, session.begin():
        deleted = await services["trend_service"](session).prune_trends(TREND_RETENTION_DAYS)
    logger.info("Pruned %d trends older than %d days", deleted, TREND_RETENTION_DAYS)
    return deleted
