"""Dependency that resolves the bearer token to a signed-in user."""

from __future__ import annotations

from fastapi import Depends, HTTPException, status

from creatorpulse.api.dependencies.unit_of_work import UnitOfWork, get_uow
from creatorpulse.core.auth import oauth2_scheme, token_subject, verify_token
from creatorpulse.core.errors import build_http_error
from creatorpulse.db.models.user import User


def _unauthorized() -> HTTPException:
    return build_http_error(
        status_code=status.HTTP_401_UNAUTHORIZED,
        error="unauthorized",
        message="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: str = Depends(oauth2_scheme), uow: UnitOfWork = Depends(get_uow)
) -> User:
    payload = verify_token(token)
    user_id = token_subject(payload) if payload is not None else None
    if payload is None or user_id is None:
        raise _unauthorized()

    user = await uow.auth_service.get_user_by_id(user_id)
    # Tokens issued before the last sign-out carry an older version.
    if user is None or payload.get("ver") != user.token_version:
        raise _unauthorized()
    return user
