from __future__ import annotations

from fastapi import APIRouter, Depends, status

from creatorpulse.api.dependencies import UnitOfWork, get_current_user, get_uow
from creatorpulse.api.openapi_responses import (
    VALIDATION_FAILED,
    authenticated_responses,
    not_found,
)
from creatorpulse.api.schemas.feedback import (
    FeedbackCreateRequest,
    FeedbackEnvelope,
    FeedbackListResponse,
    FeedbackResponse,
    FeedbackUpdateRequest,
)
from creatorpulse.api.schemas.meta import MessageResponse
from creatorpulse.api.service_errors import service_http_error
from creatorpulse.db.models.user import User
from creatorpulse.services.errors import ServiceError

router = APIRouter()


@router.get(
    "/newsletter/{newsletter_id}",
    summary="Feedback for a newsletter",
    response_model=FeedbackListResponse,
    responses=authenticated_responses(not_found("Newsletter")),
)
async def list_newsletter_feedback(
    newsletter_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> FeedbackListResponse:
    try:
        entries = await uow.feedback_service.list_for_newsletter(newsletter_id, current_user.id)
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return FeedbackListResponse(feedback=[FeedbackResponse.model_validate(f) for f in entries])


@router.post(
    "",
    summary="Rate a newsletter",
    response_model=FeedbackEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=authenticated_responses(VALIDATION_FAILED, not_found("Newsletter")),
)
async def create_feedback(
    payload: FeedbackCreateRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> FeedbackEnvelope:
    try:
        feedback = await uow.feedback_service.create_feedback(
            current_user.id, payload.newsletter_id, payload.rating, payload.comment
        )
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return FeedbackEnvelope(feedback=FeedbackResponse.model_validate(feedback))


@router.put(
    "/{feedback_id}",
    summary="Edit feedback",
    response_model=FeedbackEnvelope,
    responses=authenticated_responses(VALIDATION_FAILED, not_found("Feedback")),
)
async def update_feedback(
    feedback_id: int,
    payload: FeedbackUpdateRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> FeedbackEnvelope:
    try:
        feedback = await uow.feedback_service.update_feedback(
            feedback_id, current_user.id, rating=payload.rating, comment=payload.comment
        )
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return FeedbackEnvelope(feedback=FeedbackResponse.model_validate(feedback))


@router.delete(
    "/{feedback_id}",
    summary="Delete feedback",
    response_model=MessageResponse,
    responses=authenticated_responses(not_found("Feedback")),
)
async def delete_feedback(
    feedback_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> MessageResponse:
    try:
        await uow.feedback_service.delete_feedback(feedback_id, current_user.id)
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return MessageResponse(message="Feedback deleted")
