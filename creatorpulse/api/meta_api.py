"""Liveness endpoint; it does not touch the database."""

from __future__ import annotations

from fastapi import APIRouter, Request

from creatorpulse.api.openapi_responses import RATE_LIMITED, error_responses
from creatorpulse.api.schemas.meta import HealthResponse
from creatorpulse.core.rate_limit import HEALTH_RATE_LIMIT, limit, rate_limit_ip_key

router = APIRouter()


@router.get(
    "/health",
    summary="Health check",
    response_model=HealthResponse,
    responses=error_responses(RATE_LIMITED),
)
@limit(HEALTH_RATE_LIMIT, key_func=rate_limit_ip_key)
def health(request: Request) -> HealthResponse:
    return HealthResponse()
