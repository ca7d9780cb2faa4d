from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class WritingSampleCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=20_000)


class WritingSampleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    content: str
    created_at: datetime | None = None


class WritingSampleEnvelope(BaseModel):
    writing_sample: WritingSampleResponse


class WritingSampleListResponse(BaseModel):
    writing_samples: list[WritingSampleResponse]
