from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from creatorpulse.api.dependencies import UnitOfWork, get_current_user, get_uow
from creatorpulse.api.openapi_responses import (
    VALIDATION_FAILED,
    authenticated_responses,
    not_found,
)
from creatorpulse.api.schemas.meta import MessageResponse
from creatorpulse.api.schemas.sources import (
    ContentItemListResponse,
    ContentItemResponse,
    SourceCreateRequest,
    SourceEnvelope,
    SourceListResponse,
    SourceResponse,
    SourceUpdateRequest,
)
from creatorpulse.api.service_errors import service_http_error
from creatorpulse.core.rate_limit import GENERATION_RATE_LIMIT, limit
from creatorpulse.db.models.user import User
from creatorpulse.services.errors import ServiceError

router = APIRouter()


@router.get(
    "",
    summary="List sources",
    response_model=SourceListResponse,
    responses=authenticated_responses(),
)
async def list_sources(
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> SourceListResponse:
    sources = await uow.source_service.list_sources(current_user.id)
    return SourceListResponse(sources=[SourceResponse.model_validate(s) for s in sources])


@router.post(
    "",
    summary="Add source",
    description="Register a social profile, video channel, or feed to aggregate.",
    response_model=SourceEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=authenticated_responses(VALIDATION_FAILED),
)
async def create_source(
    payload: SourceCreateRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> SourceEnvelope:
    source = await uow.source_service.create_source(
        current_user.id, payload.type, payload.handle, payload.url
    )
    return SourceEnvelope(source=SourceResponse.model_validate(source))


@router.post(
    "/refresh",
    summary="Fetch content now",
    description="Fetch every configured source for the current user and store the items.",
    response_model=ContentItemListResponse,
    responses=authenticated_responses(),
)
@limit(GENERATION_RATE_LIMIT)
async def refresh_sources(
    request: Request,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> ContentItemListResponse:
    items = await uow.content_service.fetch_all_user_content(current_user.id)
    return ContentItemListResponse(
        content_items=[ContentItemResponse.model_validate(item) for item in items]
    )


@router.put(
    "/{source_id}",
    summary="Update source",
    response_model=SourceEnvelope,
    responses=authenticated_responses(VALIDATION_FAILED, not_found("Source")),
)
async def update_source(
    source_id: int,
    payload: SourceUpdateRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> SourceEnvelope:
    try:
        source = await uow.source_service.update_source(
            source_id,
            current_user.id,
            type=payload.type,
            handle=payload.handle,
            url=payload.url,
        )
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return SourceEnvelope(source=SourceResponse.model_validate(source))


@router.delete(
    "/{source_id}",
    summary="Delete source",
    response_model=MessageResponse,
    responses=authenticated_responses(not_found("Source")),
)
async def delete_source(
    source_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> MessageResponse:
    try:
        await uow.source_service.delete_source(source_id, current_user.id)
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return MessageResponse(message="Source deleted")
