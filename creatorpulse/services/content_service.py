"""Content aggregation: fan out over a user's sources, persist idempotently, window by recency."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import NAMESPACE_URL, uuid5

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from creatorpulse.core.results import capture, partition
from creatorpulse.db.models.content_item import ContentItem
from creatorpulse.db.models.source import Source, SourceType
from creatorpulse.fetchers import FeedFetchError, FetcherRegistry, SourceDescriptor

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}
# Columns refreshed when an item is fetched again.
_UPSERT_COLUMNS = ("source_id", "title", "content", "url", "published_at", "engagement_metrics")


class UnsupportedDialectError(SQLAlchemyError):
    """The bound database has no native upsert this repository knows how to emit."""


def make_content_id(source_id: int, native_id: str) -> str:
    """Stable identifier for one upstream entry as seen through one source."""
    return str(uuid5(NAMESPACE_URL, f"{source_id}:{native_id}"))


class ContentItemRepository:
    """Put-if-absent-or-replace storage for content items, keyed by id."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert_many(self, items: Iterable[ContentItem]) -> int:
        """Insert new items and overwrite existing ones with the same id.

        Duplicate ids within one batch collapse to the last occurrence.
        Returns the number of distinct ids written.
        """
        rows = {item.id: _as_row(item) for item in items}
        if not rows:
            return 0

        dialect = self._session.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise UnsupportedDialectError(f"Content upsert is not supported on {dialect}")

        stmt = insert(ContentItem).values(list(rows.values()))
        stmt = stmt.on_conflict_do_update(
            index_elements=[ContentItem.id],
            set_={column: stmt.excluded[column] for column in (*_UPSERT_COLUMNS, "fetched_at")},
        )
        await self._session.execute(stmt)
        return len(rows)


def _as_row(item: ContentItem) -> dict[str, Any]:
    row: dict[str, Any] = {"id": item.id, "fetched_at": item.fetched_at or datetime.now(UTC)}
    for column in _UPSERT_COLUMNS:
        row[column] = getattr(item, column)
    return row


class ContentService:
    """Aggregates content across a user's sources and answers recency queries."""

    def __init__(self, session: AsyncSession, fetchers: FetcherRegistry) -> None:
        self._session = session
        self._fetchers = fetchers
        self.repository = ContentItemRepository(session)

    async def fetch_all_user_content(self, user_id: int) -> list[ContentItem]:
        """Fetch every source the user owns, one at a time, and persist the merged result.

        A source that fails to fetch contributes nothing. A storage failure is
        logged and rolled back to a savepoint; the fetched items are returned either way.
        """
        result = await self._session.execute(
            select(Source).where(Source.user_id == user_id).order_by(Source.id)
        )
        sources = list(result.scalars().all())

        outcomes = [await capture(source.id, self._fetch_source(source)) for source in sources]
        report = partition(outcomes, label="Source fetch")
        items = [item for batch in report.values() for item in batch]

        if items:
            try:
                async with self._session.begin_nested():
                    written = await self.repository.upsert_many(items)
                logger.info(
                    "Stored fetched content",
                    extra={"user_id": user_id, "items": written, "sources": report.total},
                )
            except SQLAlchemyError:
                logger.exception("Failed to store fetched content", extra={"user_id": user_id})
        return items

    async def _fetch_source(self, source: Source) -> list[ContentItem]:
        fetcher = self._fetchers.get(SourceType(source.type))
        if fetcher is None:
            raise FeedFetchError(f"No fetcher registered for source type {source.type!r}")

        fetched = await fetcher.fetch(SourceDescriptor.from_source(source))
        fetched_at = datetime.now(UTC)
        return [
            ContentItem(
                id=make_content_id(source.id, entry.native_id),
                source_id=source.id,
                title=entry.title,
                content=entry.content,
                url=entry.url,
                published_at=entry.published_at,
                engagement_metrics=dict(entry.engagement_metrics),
                fetched_at=fetched_at,
            )
            for entry in fetched
        ]

    async def get_recent_content(
        self, user_id: int, days: int = 7, *, now: datetime | None = None
    ) -> list[ContentItem]:
        """Stored items from the user's sources published at or after `now - days`, newest first."""
        reference = (now or datetime.now(UTC)).astimezone(UTC)
        cutoff = reference - timedelta(days=days)
        result = await self._session.execute(
            select(ContentItem)
            .join(Source, ContentItem.source_id == Source.id)
            .where(Source.user_id == user_id, ContentItem.published_at >= cutoff)
            .order_by(ContentItem.published_at.desc(), ContentItem.id)
        )
        return list(result.scalars().all())

    async def prune_content(self, older_than_days: int = 30) -> int:
        """Delete items published before the cutoff; returns the number removed."""
        cutoff = datetime.now(UTC) - timedelta(days=older_than_days)
        result = await self._session.execute(
            delete(ContentItem).where(ContentItem.published_at < cutoff)
        )
        return result.rowcount or 0


def content_service_factory_provider(
    fetchers: FetcherRegistry,
) -> Callable[[AsyncSession], ContentService]:
    def factory(session: AsyncSession) -> ContentService:
        return ContentService(session, fetchers)

    return factory
