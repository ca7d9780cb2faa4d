from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok"] = Field(default="ok", description="Always `ok` while the API serves")


class MessageResponse(BaseModel):
    """Confirmation returned by delete and sign-out endpoints."""

    message: str = Field(..., examples=["Source deleted"])
