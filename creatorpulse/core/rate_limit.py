"""Request rate limits keyed by signed-in user, or by client address for anonymous calls."""

from __future__ import annotations

from collections.abc import Callable
from typing import Final, ParamSpec, TypeVar, cast

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from creatorpulse.core.auth import token_subject, verify_token
from creatorpulse.core.config import settings

DEFAULT_RATE_LIMIT: Final[str] = "120/minute"
HEALTH_RATE_LIMIT: Final[str] = "300/minute"
AUTH_SIGNUP_RATE_LIMIT: Final[str] = "5/minute"
AUTH_SIGNIN_RATE_LIMIT: Final[str] = "10/minute"
# Fetching, trend analysis and drafting all call out to third parties.
GENERATION_RATE_LIMIT: Final[str] = "5/minute"

P = ParamSpec("P")
R = TypeVar("R")
KeyFunc = Callable[[Request], str]


def rate_limit_ip_key(request: Request) -> str:
    return f"ip:{get_remote_address(request)}"


def _bearer_user_id(request: Request) -> int | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    payload = verify_token(token)
    return token_subject(payload) if payload is not None else None


def rate_limit_user_or_ip_key(request: Request) -> str:
    # Token version is not checked here; a revoked token still counts against its user.
    user_id = _bearer_user_id(request)
    if user_id is None:
        return rate_limit_ip_key(request)
    return f"user:{user_id}"


limiter = Limiter(
    key_func=rate_limit_user_or_ip_key,
    default_limits=[DEFAULT_RATE_LIMIT],
    storage_uri=settings.rate_limit_storage_url,
    in_memory_fallback_enabled=True,
    in_memory_fallback=[DEFAULT_RATE_LIMIT],
    enabled=settings.rate_limit_enabled,
)


def limit(
    limit_value: str, *, key_func: KeyFunc | None = None
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Apply `limit_value` to a route, keeping the endpoint's signature for type checkers."""
    decorator = cast(Callable[..., Callable[[Callable[P, R]], Callable[P, R]]], limiter.limit)
    return decorator(limit_value, key_func=key_func)
