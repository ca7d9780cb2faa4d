from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, urlparse

import feedparser
import httpx

from creatorpulse.db.models.source import SourceType
from creatorpulse.fetchers.base import FeedFetchError, SourceDescriptor
from creatorpulse.fetchers.feed import FeedFetcher


def channel_id_for(source: SourceDescriptor) -> str:
    """Channel id from the source URL (query or path), else the handle itself."""
    if source.url:
        parsed = urlparse(source.url)
        query_ids = parse_qs(parsed.query).get("channel_id")
        if query_ids and query_ids[0].strip():
            return query_ids[0].strip()
        segments = [segment for segment in parsed.path.split("/") if segment]
        if "channel" in segments:
            index = segments.index("channel")
            if index + 1 < len(segments):
                return segments[index + 1]
        if segments:
            return segments[-1]
    return source.handle.strip()


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class VideoFetcher(FeedFetcher):
    """Reads a video channel's public upload feed; entries are videos."""

    source_type = SourceType.VIDEO

    def __init__(
        self,
        *,
        feed_url_template: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
        max_items: int | None = None,
    ) -> None:
        super().__init__(client=client, timeout=timeout, max_items=max_items)
        self.feed_url_template = feed_url_template

    def resolve_feed_url(self, source: SourceDescriptor) -> str:
        channel_id = channel_id_for(source)
        if not channel_id:
            raise FeedFetchError("Video source has no channel id")
        return self.feed_url_template.format(channel_id=channel_id)

    def engagement_metrics(self, entry: feedparser.FeedParserDict) -> dict[str, Any]:
        metrics: dict[str, Any] = {}
        views = _as_int((entry.get("media_statistics") or {}).get("views"))
        if views is not None:
            metrics["views"] = views
        likes = _as_int((entry.get("media_starrating") or {}).get("count"))
        if likes is not None:
            metrics["likes"] = likes
        return metrics
