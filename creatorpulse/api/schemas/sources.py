from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from creatorpulse.db.models.source import SourceType


class SourceCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"type": "feed", "handle": "hn", "url": "https://news.ycombinator.com/rss"},
                {"type": "social", "handle": "@fastapi"},
            ]
        }
    )

    type: SourceType
    handle: str = Field(..., min_length=1, max_length=300)
    url: str | None = Field(default=None, max_length=2048)

    @field_validator("handle")
    @classmethod
    def strip_handle(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Handle must include text")
        return stripped


class SourceUpdateRequest(BaseModel):
    type: SourceType | None = None
    handle: str | None = Field(default=None, min_length=1, max_length=300)
    url: str | None = Field(default=None, max_length=2048)


class SourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: SourceType
    handle: str
    url: str | None = None
    created_at: datetime | None = None


class SourceEnvelope(BaseModel):
    source: SourceResponse


class SourceListResponse(BaseModel):
    sources: list[SourceResponse]


class ContentItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    source_id: int
    title: str
    content: str
    url: str
    published_at: datetime
    engagement_metrics: dict[str, Any] = Field(default_factory=dict)


class ContentItemListResponse(BaseModel):
    content_items: list[ContentItemResponse]
