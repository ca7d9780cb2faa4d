"""Password hashing and signed session tokens."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Final

from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from creatorpulse.core.config import settings

BCRYPT_MAX_PASSWORD_BYTES: Final[int] = 72

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Only used to pull the bearer token out of the Authorization header.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/signin")


def _ensure_bcrypt_length(password: str) -> None:
    # bcrypt silently truncates anything longer, so two different passwords could match.
    if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(
            f"Password must not exceed {BCRYPT_MAX_PASSWORD_BYTES} bytes when UTF-8 encoded."
        )


def get_password_hash(password: str) -> str:
    _ensure_bcrypt_length(password)
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    _ensure_bcrypt_length(plain_password)
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    data: dict[str, Any], expires_delta: timedelta | None = None
) -> tuple[str, datetime]:
    """Sign `data` as a JWT.

    Args:
        data: Claims to embed. An `exp` claim is added.
        expires_delta: Lifetime of the token; defaults to the configured expiry.

    Returns:
        The encoded token and the moment it expires.
    """
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    expires_at = datetime.now(UTC) + lifetime
    claims = {**data, "exp": expires_at}
    token = jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token, expires_at


def create_session_token(user_id: int, token_version: int) -> tuple[str, datetime]:
    """Issue a token bound to the user's current session generation."""
    return create_access_token({"sub": str(user_id), "ver": token_version})


def verify_token(token: str) -> dict[str, Any] | None:
    """Decode a token, returning None when the signature or expiry does not check out."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def token_subject(payload: dict[str, Any]) -> int | None:
    """Return the numeric user id carried in `sub`, if it is well formed."""
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.isdigit():
        return None
    return int(subject)
