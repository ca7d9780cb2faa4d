from __future__ import annotations

from typing import ClassVar
from urllib.parse import urlparse

import httpx

from creatorpulse.db.models.source import SourceType
from creatorpulse.fetchers.base import FeedFetchError, SourceDescriptor
from creatorpulse.fetchers.feed import FeedFetcher


def social_handle(source: SourceDescriptor) -> str:
    """Profile handle without the leading `@`, falling back to the profile URL's path."""
    handle = source.handle.strip().lstrip("@")
    if not handle and source.url:
        segments = [segment for segment in urlparse(source.url).path.split("/") if segment]
        handle = segments[0].lstrip("@") if segments else ""
    return handle


class SocialFetcher(FeedFetcher):
    """Reads a social profile through a profile-feed bridge; entries are posts."""

    source_type = SourceType.SOCIAL
    default_max_items: ClassVar[int] = 20

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
        handle = social_handle(source)
        if not handle:
            raise FeedFetchError("Social source has no handle")
        return self.feed_url_template.format(handle=handle)

    def default_title(self, source: SourceDescriptor) -> str:
        return f"Post by @{social_handle(source)}"
