"""Trend derivation from recent content via the text generator."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from creatorpulse.core.config import settings
from creatorpulse.db.models.content_item import ContentItem
from creatorpulse.db.models.trend import Trend
from creatorpulse.llm.client import LLMClient, LLMServiceError
from creatorpulse.llm.prompts import TREND_ANALYSIS_SYSTEM_PROMPT, get_trend_analysis_prompt
from creatorpulse.llm.schemas import TrendDraft, TrendParseError, parse_trend_response
from creatorpulse.services.content_service import ContentService
from creatorpulse.services.errors import ServiceError

logger = logging.getLogger(__name__)

FALLBACK_TREND_COUNT = 3
TREND_WINDOW_DAYS = 7


class TrendAnalysisError(ServiceError):
    """Raised when the generator call itself fails (not when its output is unparseable)."""


def build_fallback_trends(items: Sequence[ContentItem]) -> list[TrendDraft]:
    """Derive placeholder trends from the first few items. Never raises."""
    trends: list[TrendDraft] = []
    for index, item in enumerate(items[:FALLBACK_TREND_COUNT], start=1):
        title = item.title or ""
        trends.append(
            TrendDraft(
                title=f"Trend {index}: {title[:50]}",
                summary=f"{(item.content or '')[:150]}...",
                keywords=title.split()[:3],
            )
        )
    return trends


def build_content_digest(items: Sequence[ContentItem], max_chars: int) -> str:
    """Concatenate title and body of each item, stopping before `max_chars`."""
    blocks: list[str] = []
    used = 0
    for item in items:
        block = f"Title: {item.title}\nContent: {item.content}"
        if blocks and used + len(block) > max_chars:
            break
        blocks.append(block[:max_chars])
        used += len(block) + 2
    return "\n\n".join(blocks)


class TrendService:
    """Asks the generator for ranked trends over a user's recent content."""

    def __init__(
        self,
        session: AsyncSession,
        llm_client: LLMClient,
        content_service: ContentService,
        *,
        max_prompt_chars: int | None = None,
    ) -> None:
        self._session = session
        self._llm_client = llm_client
        self._content_service = content_service
        self._max_prompt_chars = max_prompt_chars or settings.trend_prompt_max_chars

    async def analyze_trends(self, items: Sequence[ContentItem]) -> list[TrendDraft]:
        """Generate trends for a content batch.

        The response must be a JSON array of trend objects; anything else
        falls back to `build_fallback_trends`.

        Raises:
            TrendAnalysisError: When the generator cannot be reached or returns nothing.
        """
        if not items:
            return []

        digest = build_content_digest(items, self._max_prompt_chars)
        try:
            response = await self._llm_client.generate(
                TREND_ANALYSIS_SYSTEM_PROMPT,
                get_trend_analysis_prompt(digest),
                temperature=0.3,
                max_tokens=1000,
            )
        except LLMServiceError as exc:
            raise TrendAnalysisError(str(exc), exc.error_code) from exc

        try:
            return parse_trend_response(response)
        except TrendParseError as exc:
            logger.warning(
                "Trend response could not be parsed; using fallback trends",
                extra={"reason": str(exc), "items": len(items)},
            )
            return build_fallback_trends(items)

    async def fetch_trends(self, user_id: int) -> list[Trend]:
        """Analyze the user's last week of content and store the resulting trends.

        Returns the stored rows, or unsaved trends if storage failed.
        """
        items = await self._content_service.get_recent_content(user_id, TREND_WINDOW_DAYS)
        if not items:
            logger.info("No recent content; skipping trend analysis", extra={"user_id": user_id})
            return []

        drafts = await self.analyze_trends(items)
        trends = [
            Trend(
                user_id=user_id,
                title=draft.title[:300],
                summary=draft.summary,
                keywords=draft.keywords,
            )
            for draft in drafts
        ]
        if not trends:
            return []

        try:
            async with self._session.begin_nested():
                self._session.add_all(trends)
                await self._session.flush()
            for trend in trends:
                await self._session.refresh(trend)
        except SQLAlchemyError:
            logger.exception("Failed to store trends", extra={"user_id": user_id})
            now = datetime.now(UTC)
            return [
                Trend(
                    user_id=user_id,
                    title=draft.title[:300],
                    summary=draft.summary,
                    keywords=draft.keywords,
                    created_at=now,
                )
                for draft in drafts
            ]
        return trends

    async def get_latest_trends(self, user_id: int, limit: int = 5) -> list[Trend]:
        result = await self._session.execute(
            select(Trend)
            .where(Trend.user_id == user_id)
            .order_by(Trend.created_at.desc(), Trend.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_trends(self, user_id: int) -> list[Trend]:
        result = await self._session.execute(
            select(Trend)
            .where(Trend.user_id == user_id)
            .order_by(Trend.created_at.desc(), Trend.id.desc())
        )
        return list(result.scalars().all())

    async def prune_trends(self, older_than_days: int = 7) -> int:
        cutoff = datetime.now(UTC) - timedelta(days=older_than_days)
        result = await self._session.execute(delete(Trend).where(Trend.created_at < cutoff))
        return result.rowcount or 0


def trend_service_factory_provider(
    llm_client: LLMClient,
    content_factory: Callable[[AsyncSession], ContentService],
) -> Callable[[AsyncSession], TrendService]:
    def factory(session: AsyncSession) -> TrendService:
        return TrendService(session, llm_client, content_factory(session))

    return factory
