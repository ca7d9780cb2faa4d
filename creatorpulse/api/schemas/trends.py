from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TrendResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    user_id: int
    title: str = Field(..., examples=["Local-first AI tooling"])
    summary: str
    keywords: list[str] = Field(default_factory=list, examples=[["ai", "local", "tooling"]])
    created_at: datetime | None = None


class TrendListResponse(BaseModel):
    trends: list[TrendResponse]
