from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status

from creatorpulse.api.dependencies import UnitOfWork, get_current_user, get_uow
from creatorpulse.api.openapi_responses import GENERATION_FAILED, authenticated_responses
from creatorpulse.api.schemas.trends import TrendListResponse, TrendResponse
from creatorpulse.api.service_errors import service_http_error
from creatorpulse.core.rate_limit import GENERATION_RATE_LIMIT, limit
from creatorpulse.db.models.user import User
from creatorpulse.services.trend_service import TrendAnalysisError

router = APIRouter()


@router.get(
    "",
    summary="List trends",
    response_model=TrendListResponse,
    responses=authenticated_responses(),
)
async def list_trends(
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> TrendListResponse:
    trends = await uow.trend_service.list_trends(current_user.id)
    return TrendListResponse(trends=[TrendResponse.model_validate(t) for t in trends])


@router.get(
    "/latest",
    summary="Latest trends",
    description="Most recently derived trends, newest first. Does not call the generator.",
    response_model=TrendListResponse,
    responses=authenticated_responses(),
)
async def latest_trends(
    limit_: int = Query(5, alias="limit", ge=1, le=50),
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> TrendListResponse:
    trends = await uow.trend_service.get_latest_trends(current_user.id, limit_)
    return TrendListResponse(trends=[TrendResponse.model_validate(t) for t in trends])


@router.post(
    "/fetch",
    summary="Derive trends",
    description="Analyze the last week of content and store the resulting trends.",
    response_model=TrendListResponse,
    status_code=status.HTTP_201_CREATED,
    responses=authenticated_responses(GENERATION_FAILED),
)
@limit(GENERATION_RATE_LIMIT)
async def fetch_trends(
    request: Request,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> TrendListResponse:
    try:
        trends = await uow.trend_service.fetch_trends(current_user.id)
    except TrendAnalysisError as exc:
        raise service_http_error(exc) from exc
    return TrendListResponse(trends=[TrendResponse.model_validate(t) for t in trends])
