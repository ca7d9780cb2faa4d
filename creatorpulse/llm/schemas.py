from __future__ import annotations

import json
from typing import Annotated, Final

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

MAX_TRENDS: Final[int] = 5
DEFAULT_TONE: Final[str] = "professional"
DEFAULT_STRUCTURE: Final[str] = "standard"


class TrendParseError(ValueError):
    """Raised when a generator response is not a JSON array of trend objects."""


class TrendDraft(BaseModel):
    """One trend as produced by the generator (or the fallback), before it is stored."""

    title: str = Field(..., min_length=1)
    summary: str = ""
    keywords: list[str] = Field(default_factory=list)

    @field_validator("title", "summary")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()


_TREND_LIST_ADAPTER: TypeAdapter[list[TrendDraft]] = TypeAdapter(
    Annotated[list[TrendDraft], Field(min_length=1)]
)


def parse_trend_response(text: str) -> list[TrendDraft]:
    """Strictly decode a generator response into trends.

    The whole response must be a JSON array of objects with a non-empty `title`.
    No attempt is made to repair or extract JSON from surrounding prose.

    Raises:
        TrendParseError: If the response is not valid JSON or does not match the schema.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TrendParseError(f"Trend response is not valid JSON: {exc.msg}") from exc
    try:
        trends = _TREND_LIST_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise TrendParseError(
            f"Trend response did not match the expected format ({exc.error_count()} errors)"
        ) from exc
    return trends[:MAX_TRENDS]


class StyleProfile(BaseModel):
    """Tone and structure descriptors inferred from a user's writing samples."""

    tone: str = DEFAULT_TONE
    structure: str = DEFAULT_STRUCTURE
    samples: list[str] = Field(default_factory=list)
