from __future__ import annotations

import hashlib
import logging
from datetime import UTC, datetime
from time import struct_time
from typing import Any, ClassVar

import feedparser
import httpx

from creatorpulse.core.prompt_sanitizer import clean_feed_text
from creatorpulse.db.models.source import SourceType
from creatorpulse.fetchers.base import (
    FeedFetchError,
    FetchedItem,
    SourceDescriptor,
    SourceFetcher,
)

logger = logging.getLogger(__name__)

USER_AGENT = "CreatorPulse/0.1 (+https://creatorpulse.app)"


class FeedFetcher(SourceFetcher):
    """Fetches a generic RSS/Atom feed from the source URL (or the handle, if it is a URL)."""

    source_type = SourceType.FEED
    default_max_items: ClassVar[int] = 10

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
        max_items: int | None = None,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self.max_items = max_items or self.default_max_items

    def resolve_feed_url(self, source: SourceDescriptor) -> str:
        return source.url or source.handle

    async def fetch(self, source: SourceDescriptor) -> list[FetchedItem]:
        feed_url = self.resolve_feed_url(source)
        parsed = await self._download(feed_url)
        fetched_at = datetime.now(UTC)

        items: list[FetchedItem] = []
        for entry in parsed.entries[: self.max_items]:
            item = self._to_item(entry, source, fetched_at)
            if item is not None:
                items.append(item)
        logger.info(
            "Fetched feed entries",
            extra={"feed_url": feed_url, "source_type": str(source.type), "count": len(items)},
        )
        return items

    async def _download(self, feed_url: str) -> feedparser.FeedParserDict:
        try:
            if self._client is not None:
                response = await self._client.get(feed_url)
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout,
                    follow_redirects=True,
                    headers={"User-Agent": USER_AGENT},
                ) as client:
                    response = await client.get(feed_url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FeedFetchError(f"Could not download feed {feed_url}: {exc}") from exc

        parsed = feedparser.parse(response.content)
        if parsed.bozo and not parsed.entries:
            raise FeedFetchError(f"Malformed feed at {feed_url}: {parsed.get('bozo_exception')}")
        return parsed

    def _to_item(
        self,
        entry: feedparser.FeedParserDict,
        source: SourceDescriptor,
        fetched_at: datetime,
    ) -> FetchedItem | None:
        title = clean_feed_text(entry.get("title")) or self.default_title(source)
        native_id = native_entry_id(entry, title)
        if native_id is None:
            return None

        body = entry.get("summary")
        if not body and entry.get("content"):
            body = entry["content"][0].get("value")

        return FetchedItem(
            native_id=native_id,
            title=title,
            content=clean_feed_text(body),
            url=entry.get("link", "") or "",
            published_at=entry_published_at(entry) or fetched_at,
            engagement_metrics=self.engagement_metrics(entry),
        )

    def default_title(self, source: SourceDescriptor) -> str:
        return ""

    def engagement_metrics(self, entry: feedparser.FeedParserDict) -> dict[str, Any]:
        return {}


def native_entry_id(entry: feedparser.FeedParserDict, title: str) -> str | None:
    """The origin's own identifier: guid, else link, else a digest of the title."""
    native_id = entry.get("id") or entry.get("link")
    if native_id:
        return str(native_id)
    if title:
        return "title:" + hashlib.sha1(title.encode("utf-8")).hexdigest()
    return None


def entry_published_at(entry: feedparser.FeedParserDict) -> datetime | None:
    parsed: struct_time | None = entry.get("published_parsed") or entry.get("updated_parsed")
    if parsed is None:
        return None
    # feedparser normalizes parsed dates to UTC
    return datetime(*parsed[:6], tzinfo=UTC)
