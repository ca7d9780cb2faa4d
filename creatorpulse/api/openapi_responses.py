from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import status

from creatorpulse.core.errors import ErrorResponse, error_body


@dataclass(frozen=True)
class ErrorExample:
    status_code: int
    error: str
    message: str
    description: str
    summary: str | None = None
    details: Any | None = None
    example_name: str | None = None


def error_responses(*examples: ErrorExample) -> dict[int | str, dict[str, Any]]:
    """OpenAPI `responses` entries for the given examples, grouped by status code."""
    responses: dict[int | str, dict[str, Any]] = {}
    for example in examples:
        entry = responses.setdefault(
            example.status_code,
            {
                "model": ErrorResponse,
                "description": example.description,
                "content": {"application/json": {"examples": {}}},
            },
        )
        value = error_body(
            example.status_code, example.message, error=example.error, details=example.details
        )
        entry["content"]["application/json"]["examples"][example.example_name or example.error] = {
            "summary": example.summary or example.description,
            "value": value,
        }
    return responses


RATE_LIMITED = ErrorExample(
    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    error="rate_limited",
    message="Too many requests",
    description="Rate limit exceeded",
    summary="Too many requests",
)

UNAUTHORIZED = ErrorExample(
    status_code=status.HTTP_401_UNAUTHORIZED,
    error="unauthorized",
    message="Could not validate credentials",
    description="Missing or invalid token",
    summary="Unauthorized",
)

VALIDATION_FAILED = ErrorExample(
    status_code=status.HTTP_400_BAD_REQUEST,
    error="bad_request",
    message="handle: String should have at least 1 character",
    description="Invalid request",
    summary="Request validation failed",
    details=[
        {
            "loc": ["body", "handle"],
            "msg": "String should have at least 1 character",
            "type": "string_too_short",
        }
    ],
)

GENERATION_FAILED = ErrorExample(
    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    error="llm_unavailable",
    message="LLM service error. Try again later.",
    description="Generation failed; nothing was saved",
    summary="Generation failed",
)


def not_found(resource: str) -> ErrorExample:
    code = resource.lower().replace(" ", "_") + "_not_found"
    return ErrorExample(
        status_code=status.HTTP_404_NOT_FOUND,
        error=code,
        message=f"{resource} 42 not found",
        description=f"{resource} does not exist or belongs to another user",
        summary="Not found",
    )


def authenticated_responses(*examples: ErrorExample) -> dict[int | str, dict[str, Any]]:
    """Responses shared by every bearer-protected route, plus route-specific ones."""
    return error_responses(UNAUTHORIZED, RATE_LIMITED, *examples)
