from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from creatorpulse.db.models.source import Source, SourceType


class FeedFetchError(Exception):
    """Raised when a source cannot be downloaded or parsed."""


@dataclass(frozen=True)
class SourceDescriptor:
    """What a fetcher needs to know about a configured source."""

    type: SourceType
    handle: str
    url: str | None = None

    @classmethod
    def from_source(cls, source: Source) -> SourceDescriptor:
        return cls(type=SourceType(source.type), handle=source.handle, url=source.url)


@dataclass(frozen=True)
class FetchedItem:
    """A normalized feed entry, before it is tagged with its source."""

    native_id: str
    title: str
    content: str
    url: str
    published_at: datetime
    engagement_metrics: dict[str, Any] = field(default_factory=dict)


class SourceFetcher(ABC):
    """Turns one source descriptor into a bounded list of normalized items."""

    source_type: ClassVar[SourceType]

    @abstractmethod
    async def fetch(self, source: SourceDescriptor) -> list[FetchedItem]:
        """Fetch the most recent items for a source.

        Raises:
            FeedFetchError: When the source cannot be reached or is not a feed.
        """
        raise NotImplementedError
