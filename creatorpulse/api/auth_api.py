from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from creatorpulse.api.dependencies import UnitOfWork, get_current_user, get_uow
from creatorpulse.api.openapi_responses import (
    RATE_LIMITED,
    VALIDATION_FAILED,
    ErrorExample,
    authenticated_responses,
    error_responses,
)
from creatorpulse.api.schemas.auth import (
    AuthResponse,
    ProfileUpdateRequest,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    UserEnvelope,
    UserResponse,
)
from creatorpulse.api.schemas.meta import MessageResponse
from creatorpulse.api.service_errors import service_http_error
from creatorpulse.core.auth import create_session_token
from creatorpulse.core.errors import build_http_error
from creatorpulse.core.rate_limit import (
    AUTH_SIGNIN_RATE_LIMIT,
    AUTH_SIGNUP_RATE_LIMIT,
    limit,
    rate_limit_ip_key,
)
from creatorpulse.db.models.user import User
from creatorpulse.services.auth_service import (
    AuthenticationError,
    InvalidCredentialsError,
)
from creatorpulse.services.errors import ResourceNotFoundError

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    token, expires_at = create_session_token(user.id, user.token_version)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        session=SessionResponse(access_token=token, expires_at=expires_at),
    )


@router.post(
    "/signup",
    summary="Sign up",
    description="Create an account and return it with a bearer session token.",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(
        VALIDATION_FAILED,
        ErrorExample(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="user_exists",
            message="Email already registered",
            description="Invalid request",
            summary="User already exists",
        ),
        RATE_LIMITED,
    ),
)
@limit(AUTH_SIGNUP_RATE_LIMIT, key_func=rate_limit_ip_key)
async def signup(
    request: Request,
    user_data: SignUpRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> AuthResponse:
    """Register a new user."""
    try:
        user = await uow.auth_service.register_user(
            user_data.email, user_data.password, user_data.name, user_data.timezone
        )
    except AuthenticationError as e:
        raise build_http_error(
            status_code=status.HTTP_400_BAD_REQUEST,
            error=e.error_code,
            message=str(e),
        ) from e
    return _auth_response(user)


@router.post(
    "/signin",
    summary="Sign in",
    description="Authenticate credentials and return a bearer session token.",
    response_model=AuthResponse,
    responses=error_responses(
        VALIDATION_FAILED,
        ErrorExample(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="invalid_credentials",
            message="Incorrect email or password",
            description="Invalid credentials",
            summary="Invalid email or password",
        ),
        RATE_LIMITED,
    ),
)
@limit(AUTH_SIGNIN_RATE_LIMIT, key_func=rate_limit_ip_key)
async def signin(
    request: Request,
    credentials: SignInRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> AuthResponse:
    """Authenticate user and return a session."""
    try:
        user = await uow.auth_service.authenticate_user(credentials.email, credentials.password)
    except InvalidCredentialsError as e:
        raise build_http_error(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error=e.error_code,
            message=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except AuthenticationError as e:
        raise build_http_error(
            status_code=status.HTTP_400_BAD_REQUEST, error=e.error_code, message=str(e)
        ) from e
    return _auth_response(user)


@router.post(
    "/signout",
    summary="Sign out",
    description="Invalidate every session token issued to the current user.",
    response_model=MessageResponse,
    responses=authenticated_responses(),
)
async def signout(
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> MessageResponse:
    await uow.auth_service.sign_out(current_user.id)
    return MessageResponse(message="Signed out")


@router.get(
    "/me",
    summary="Get current user",
    description="Return the user for the provided bearer token.",
    response_model=UserEnvelope,
    responses=authenticated_responses(),
)
async def get_me(current_user: User = Depends(get_current_user)) -> UserEnvelope:
    """Get current authenticated user information."""
    return UserEnvelope(user=UserResponse.model_validate(current_user))


@router.put(
    "/profile",
    summary="Update profile",
    description="Replace the display name and the timezone newsletters are dated in.",
    response_model=UserEnvelope,
    responses=authenticated_responses(VALIDATION_FAILED),
)
async def update_profile(
    profile: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> UserEnvelope:
    try:
        user = await uow.auth_service.update_profile(
            current_user.id, profile.name, profile.timezone
        )
    except ResourceNotFoundError as exc:
        raise service_http_error(exc) from exc
    return UserEnvelope(user=UserResponse.model_validate(user))
