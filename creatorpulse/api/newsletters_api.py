from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from creatorpulse.api.dependencies import UnitOfWork, get_current_user, get_uow
from creatorpulse.api.openapi_responses import (
    GENERATION_FAILED,
    VALIDATION_FAILED,
    ErrorExample,
    authenticated_responses,
    not_found,
)
from creatorpulse.api.schemas.meta import MessageResponse
from creatorpulse.api.schemas.newsletters import (
    NewsletterEnvelope,
    NewsletterListResponse,
    NewsletterResponse,
    NewsletterSendResponse,
    NewsletterStatsResponse,
    NewsletterUpdateRequest,
)
from creatorpulse.api.service_errors import service_http_error
from creatorpulse.core.rate_limit import GENERATION_RATE_LIMIT, limit
from creatorpulse.db.models.user import User
from creatorpulse.services.errors import ServiceError

router = APIRouter()

ALREADY_SENT = ErrorExample(
    status_code=status.HTTP_409_CONFLICT,
    error="newsletter_already_sent",
    message="Newsletter 42 has already been sent",
    description="Newsletter was already delivered",
    summary="Already sent",
)


@router.get(
    "",
    summary="List newsletters",
    response_model=NewsletterListResponse,
    responses=authenticated_responses(),
)
async def list_newsletters(
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> NewsletterListResponse:
    newsletters = await uow.newsletter_service.list_newsletters(current_user.id)
    return NewsletterListResponse(
        newsletters=[NewsletterResponse.model_validate(n) for n in newsletters]
    )


# Declared before /{newsletter_id} so "stats" is not parsed as an id.
@router.get(
    "/stats",
    summary="Newsletter stats",
    description="Sent/draft counts and feedback tallies. Open and click rates are always 0.",
    response_model=NewsletterStatsResponse,
    responses=authenticated_responses(),
)
async def newsletter_stats(
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> NewsletterStatsResponse:
    stats = await uow.newsletter_service.get_newsletter_stats(current_user.id)
    return NewsletterStatsResponse.model_validate(stats)


@router.post(
    "/generate",
    summary="Generate newsletter",
    description="Compose a draft from recent trends, content and the user's writing style.",
    response_model=NewsletterEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=authenticated_responses(GENERATION_FAILED),
)
@limit(GENERATION_RATE_LIMIT)
async def generate_newsletter(
    request: Request,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> NewsletterEnvelope:
    try:
        newsletter = await uow.newsletter_service.generate_newsletter(current_user.id)
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return NewsletterEnvelope(newsletter=NewsletterResponse.model_validate(newsletter))


@router.get(
    "/{newsletter_id}",
    summary="Get newsletter",
    response_model=NewsletterEnvelope,
    responses=authenticated_responses(not_found("Newsletter")),
)
async def get_newsletter(
    newsletter_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> NewsletterEnvelope:
    try:
        newsletter = await uow.newsletter_service.get_newsletter(newsletter_id, current_user.id)
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return NewsletterEnvelope(newsletter=NewsletterResponse.model_validate(newsletter))


@router.post(
    "/{newsletter_id}/send",
    summary="Send newsletter",
    description=(
        "Email the draft to the current user. It is marked sent only when the email "
        "provider accepts it; a failed attempt can be retried."
    ),
    response_model=NewsletterSendResponse,
    responses=authenticated_responses(not_found("Newsletter"), ALREADY_SENT),
)
async def send_newsletter(
    newsletter_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> NewsletterSendResponse:
    service = uow.newsletter_service
    try:
        sent = await service.send_newsletter(newsletter_id, current_user.id)
        newsletter = await service.get_newsletter(newsletter_id, current_user.id)
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return NewsletterSendResponse(
        sent=sent, newsletter=NewsletterResponse.model_validate(newsletter)
    )


@router.put(
    "/{newsletter_id}",
    summary="Edit newsletter",
    response_model=NewsletterEnvelope,
    responses=authenticated_responses(VALIDATION_FAILED, not_found("Newsletter")),
)
async def update_newsletter(
    newsletter_id: int,
    payload: NewsletterUpdateRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> NewsletterEnvelope:
    try:
        newsletter = await uow.newsletter_service.update_newsletter(
            newsletter_id, current_user.id, payload.content
        )
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return NewsletterEnvelope(newsletter=NewsletterResponse.model_validate(newsletter))


@router.delete(
    "/{newsletter_id}",
    summary="Delete newsletter",
    response_model=MessageResponse,
    responses=authenticated_responses(not_found("Newsletter")),
)
async def delete_newsletter(
    newsletter_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> MessageResponse:
    try:
        await uow.newsletter_service.delete_newsletter(newsletter_id, current_user.id)
    except ServiceError as exc:
        raise service_http_error(exc) from exc
    return MessageResponse(message="Newsletter deleted")
