from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from creatorpulse.db.models.feedback import FeedbackRating


class FeedbackCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{"newsletter_id": 7, "rating": "positive", "comment": "Great picks"}]
        }
    )

    newsletter_id: int
    rating: FeedbackRating
    comment: str | None = Field(default=None, max_length=2000)


class FeedbackUpdateRequest(BaseModel):
    rating: FeedbackRating | None = None
    comment: str | None = Field(default=None, max_length=2000)


class FeedbackResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    newsletter_id: int
    user_id: int
    rating: FeedbackRating
    comment: str | None = None
    created_at: datetime | None = None


class FeedbackEnvelope(BaseModel):
    feedback: FeedbackResponse


class FeedbackListResponse(BaseModel):
    feedback: list[FeedbackResponse]
