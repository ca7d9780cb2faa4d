"""Per-source-type fetchers and the registry the aggregator dispatches through."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from creatorpulse.core.config import Settings
from creatorpulse.db.models.source import SourceType
from creatorpulse.fetchers.base import (
    FeedFetchError,
    FetchedItem,
    SourceDescriptor,
    SourceFetcher,
)
from creatorpulse.fetchers.feed import FeedFetcher
from creatorpulse.fetchers.social import SocialFetcher
from creatorpulse.fetchers.video import VideoFetcher

FetcherRegistry = Mapping[SourceType, SourceFetcher]


def build_default_fetchers(
    settings: Settings, *, client: httpx.AsyncClient | None = None
) -> dict[SourceType, SourceFetcher]:
    timeout = settings.feed_fetch_timeout_seconds
    return {
        SourceType.SOCIAL: SocialFetcher(
            feed_url_template=settings.social_feed_url_template, client=client, timeout=timeout
        ),
        SourceType.VIDEO: VideoFetcher(
            feed_url_template=settings.video_feed_url_template, client=client, timeout=timeout
        ),
        SourceType.FEED: FeedFetcher(client=client, timeout=timeout),
    }


__all__ = [
    "FeedFetchError",
    "FeedFetcher",
    "FetchedItem",
    "FetcherRegistry",
    "SocialFetcher",
    "SourceDescriptor",
    "SourceFetcher",
    "VideoFetcher",
    "build_default_fetchers",
]
