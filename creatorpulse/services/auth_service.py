"""Account registration, credential checks and session revocation."""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from creatorpulse.core.auth import BCRYPT_MAX_PASSWORD_BYTES, get_password_hash, verify_password
from creatorpulse.db.models.user import User
from creatorpulse.services.errors import ResourceNotFoundError

DEFAULT_TIMEZONE = "UTC"


class AuthenticationError(Exception):
    """Base error for sign-up and sign-in failures; `error_code` is the API error code."""

    error_code: str = "authentication_failed"
    default_message: str = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class UserAlreadyExistsError(AuthenticationError):
    error_code = "user_exists"
    default_message = "Email already registered"


class InvalidCredentialsError(AuthenticationError):
    error_code = "invalid_credentials"
    default_message = "Incorrect email or password"


class PasswordTooLongError(AuthenticationError):
    error_code = "password_too_long"
    default_message = (
        f"Password must not exceed {BCRYPT_MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
    )


class AuthService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _find_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register_user(
        self,
        email: str,
        password: str,
        name: str | None = None,
        timezone: str | None = None,
    ) -> User:
        """Create an account with a hashed password.

        Args:
            email: Sign-in address; must not be registered yet.
            password: Plain text password, at most 72 bytes once UTF-8 encoded.
            name: Display name used in newsletter greetings.
            timezone: IANA timezone name; defaults to UTC.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
            PasswordTooLongError: If the password is too long for bcrypt.
        """
        if await self._find_by_email(email) is not None:
            raise UserAlreadyExistsError()
        try:
            hashed_password = get_password_hash(password)
        except ValueError as exc:
            raise PasswordTooLongError() from exc

        user = User(
            email=email,
            hashed_password=hashed_password,
            name=name,
            timezone=timezone or DEFAULT_TIMEZONE,
            token_version=0,
        )
        # A concurrent sign-up for the same email can still win the race.
        try:
            async with self._session.begin_nested():
                self._session.add(user)
        except IntegrityError as exc:
            raise UserAlreadyExistsError() from exc
        await self._session.refresh(user)
        return user

    async def authenticate_user(self, email: str, password: str) -> User:
        """Return the user whose credentials match.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong.
            PasswordTooLongError: If the password is too long for bcrypt.
        """
        user = await self._find_by_email(email)
        if user is None:
            raise InvalidCredentialsError()
        try:
            matches = verify_password(password, user.hashed_password)
        except ValueError as exc:
            raise PasswordTooLongError() from exc
        if not matches:
            raise InvalidCredentialsError()
        return user

    async def get_user_by_id(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def update_profile(self, user_id: int, name: str | None, timezone: str) -> User:
        """Replace the display name and timezone used when dating newsletters.

        Raises:
            ResourceNotFoundError: If the user no longer exists.
        """
        user = await self._session.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        user.name = name
        user.timezone = timezone
        await self._session.flush()
        return user

    async def sign_out(self, user_id: int) -> None:
        """Invalidate every token issued to the user so far."""
        await self._session.execute(
            update(User)
            .where(User.id == user_id)
            .values(token_version=User.token_version + 1)
            .execution_options(synchronize_session=False)
        )

    async def list_users(self) -> list[User]:
        result = await self._session.execute(select(User).order_by(User.id))
        return list(result.scalars().all())


def auth_service_factory_provider() -> Callable[[AsyncSession], AuthService]:
    def factory(session: AsyncSession) -> AuthService:
        return AuthService(session)

    return factory
