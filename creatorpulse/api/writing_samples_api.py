from __future__ import annotations

from fastapi import APIRouter, Depends, status

from creatorpulse.api.dependencies import UnitOfWork, get_current_user, get_uow
from creatorpulse.api.openapi_responses import (
    VALIDATION_FAILED,
    ErrorExample,
    authenticated_responses,
    not_found,
)
from creatorpulse.api.schemas.meta import MessageResponse
from creatorpulse.api.schemas.writing_samples import (
    WritingSampleCreateRequest,
    WritingSampleEnvelope,
    WritingSampleListResponse,
    WritingSampleResponse,
)
from creatorpulse.api.service_errors import service_http_error
from creatorpulse.core.errors import build_http_error
from creatorpulse.core.prompt_sanitizer import PromptValidationError
from creatorpulse.db.models.user import User
from creatorpulse.services.errors import ServiceError

router = APIRouter()


@router.get(
    "",
    summary="List writing samples",
    response_model=WritingSampleListResponse,
    responses=authenticated_responses(),
)
async def list_writing_samples(
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> WritingSampleListResponse:
    samples = await uow.writing_sample_service.list_samples(current_user.id)
    return WritingSampleListResponse(
        writing_samples=[WritingSampleResponse.model_validate(s) for s in samples]
    )


@router.post(
    "",
    summary="Add writing sample",
    description="Store a past piece of writing used to match the newsletter's voice.",
    response_model=WritingSampleEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=authenticated_responses(
        VALIDATION_FAILED,
        ErrorExample(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="invalid_prompt_text",
            message="Writing sample contains disallowed instruction patterns.",
            description="Invalid request",
            summary="Sample rejected",
        ),
    ),
)
async def create_writing_sample(
    payload: WritingSampleCreateRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> WritingSampleEnvelope:
    try:
        sample = await uow.writing_sample_service.create_sample(current_user.id, payload.content)
    except PromptValidationError as exc:
        raise build_http_error(
            status_code=status.HTTP_400_BAD_REQUEST,
            error=exc.error_code,
            message=str(exc),
        ) from exc
    return WritingSampleEnvelope(writing_sample=WritingSampleResponse.model_validate(sample))


@router.delete(
    "/{sample_id}",
    summary="Delete writing sample",
    response_model=MessageResponse,
    responses=authenticated_responses(not_found("Writing sample")),
)
async def delete_writing_sample(
    sample_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> MessageResponse:
    try:
        await uow.writing_sample_service.delete_sample(sample_id, current_user.id)
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return MessageResponse(message="Writing sample deleted")
