from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NewsletterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    content: str
    created_at: datetime | None = None
    sent_at: datetime | None = None


class NewsletterEnvelope(BaseModel):
    newsletter: NewsletterResponse


class NewsletterListResponse(BaseModel):
    newsletters: list[NewsletterResponse]


class NewsletterUpdateRequest(BaseModel):
    content: str = Field(..., min_length=1)


class NewsletterSendResponse(BaseModel):
    sent: bool
    newsletter: NewsletterResponse


class NewsletterStatsResponse(BaseModel):
    """Counts over the caller's newsletters and the feedback left on them."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "examples": [
                {
                    "total": 3,
                    "sent": 2,
                    "drafts": 1,
                    "positive_feedback": 2,
                    "negative_feedback": 1,
                    "open_rate": 0,
                    "click_rate": 0,
                }
            ]
        },
    )

    total: int
    sent: int
    drafts: int
    positive_feedback: int
    negative_feedback: int
    open_rate: float = 0
    click_rate: float = 0
