"""Integration tests for authentication API endpoints.

These tests verify the full HTTP request/response cycle, including:
- Request validation and the error payload format
- Session tokens and sign-out invalidation
- Database operations
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creatorpulse.api.schemas import AuthResponse, UserEnvelope
from creatorpulse.db.models.user import User


class TestSignUp:
    """Test the sign-up endpoint."""

    @pytest.mark.asyncio
    async def test_signup_success(
        self, async_http_client: AsyncClient, db_session: AsyncSession
    ) -> None:
        """Test that sign-up creates the user and returns a session."""
        # Arrange
        payload = {
            "email": "ada@example.com",
            "password": "Password123!",
            "name": "Ada",
            "timezone": "Europe/London",
        }

        # Act
        response = await async_http_client.post("/api/auth/signup", json=payload)

        # Assert
        assert response.status_code == status.HTTP_201_CREATED
        parsed = AuthResponse.model_validate(response.json())
        assert parsed.user.email == "ada@example.com"
        assert parsed.user.timezone == "Europe/London"
        assert parsed.session.token_type == "bearer"
        assert parsed.session.access_token

        result = await db_session.execute(select(User).where(User.email == "ada@example.com"))
        user = result.scalar_one()
        assert user.hashed_password != payload["password"]

    @pytest.mark.asyncio
    async def test_signup_defaults_timezone_to_utc(
        self, signup: Callable[..., Any]
    ) -> None:
        """Test that a user without a timezone gets UTC."""
        user, _ = await signup()

        assert user["timezone"] == "UTC"

    @pytest.mark.asyncio
    async def test_signup_duplicate_email(
        self, async_http_client: AsyncClient, signup: Callable[..., Any]
    ) -> None:
        """Test that registering an existing email returns 400."""
        # Arrange
        await signup("duplicate@example.com")

        # Act
        response = await async_http_client.post(
            "/api/auth/signup",
            json={"email": "duplicate@example.com", "password": "Password123!"},
        )

        # Assert
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        payload = response.json()
        assert payload["error"] == "user_exists"
        assert "already registered" in payload["message"].lower()

    @pytest.mark.asyncio
    async def test_signup_password_too_short(self, async_http_client: AsyncClient) -> None:
        """Test that validation failures use the standard error payload."""
        # Act
        response = await async_http_client.post(
            "/api/auth/signup", json={"email": "ada@example.com", "password": "short"}
        )

        # Assert
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        payload = response.json()
        assert payload["error"] == "bad_request"
        assert payload["message"].startswith("password: ")
        assert payload["details"][0]["loc"] == ["body", "password"]

    @pytest.mark.asyncio
    async def test_signup_invalid_email(self, async_http_client: AsyncClient) -> None:
        """Test that an invalid email is rejected."""
        response = await async_http_client.post(
            "/api/auth/signup", json={"email": "not-an-email", "password": "Password123!"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"].startswith("email: ")


class TestSignIn:
    """Test the sign-in endpoint."""

    @pytest.mark.asyncio
    async def test_signin_success(
        self, async_http_client: AsyncClient, signup: Callable[..., Any]
    ) -> None:
        """Test that valid credentials return a working token."""
        # Arrange
        await signup("ada@example.com", "Password123!")

        # Act
        response = await async_http_client.post(
            "/api/auth/signin", json={"email": "ada@example.com", "password": "Password123!"}
        )

        # Assert
        assert response.status_code == status.HTTP_200_OK
        token = AuthResponse.model_validate(response.json()).session.access_token
        me = await async_http_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert me.status_code == status.HTTP_200_OK
        assert UserEnvelope.model_validate(me.json()).user.email == "ada@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,password",
        [("ada@example.com", "WrongPassword1"), ("nobody@example.com", "Password123!")],
        ids=["wrong-password", "unknown-email"],
    )
    async def test_signin_invalid_credentials(
        self,
        async_http_client: AsyncClient,
        signup: Callable[..., Any],
        email: str,
        password: str,
    ) -> None:
        """Test that bad credentials return 401 without revealing which part was wrong."""
        # Arrange
        await signup("ada@example.com", "Password123!")

        # Act
        response = await async_http_client.post(
            "/api/auth/signin", json={"email": email, "password": password}
        )

        # Assert
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json() == {
            "error": "invalid_credentials",
            "message": "Incorrect email or password",
        }


class TestSession:
    """Test token-protected endpoints and sign-out."""

    @pytest.mark.asyncio
    async def test_me_requires_token(self, async_http_client: AsyncClient) -> None:
        """Test that a missing token returns 401."""
        response = await async_http_client.get("/api/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_me_rejects_garbage_token(self, async_http_client: AsyncClient) -> None:
        """Test that an undecodable token returns 401."""
        response = await async_http_client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not.a.token"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Could not validate credentials"

    @pytest.mark.asyncio
    async def test_signout_invalidates_existing_tokens(
        self, async_http_client: AsyncClient, signup: Callable[..., Any]
    ) -> None:
        """Test that tokens issued before sign-out stop working."""
        # Arrange
        _, headers = await signup("ada@example.com", "Password123!")

        # Act
        signout = await async_http_client.post("/api/auth/signout", headers=headers)
        me_after = await async_http_client.get("/api/auth/me", headers=headers)

        # Assert
        assert signout.status_code == status.HTTP_200_OK
        assert signout.json() == {"message": "Signed out"}
        assert me_after.status_code == status.HTTP_401_UNAUTHORIZED

        signin = await async_http_client.post(
            "/api/auth/signin", json={"email": "ada@example.com", "password": "Password123!"}
        )
        token = signin.json()["session"]["access_token"]
        fresh = await async_http_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert fresh.status_code == status.HTTP_200_OK


class TestProfile:
    """Test the profile update endpoint."""

    @pytest.mark.asyncio
    async def test_update_profile_replaces_name_and_timezone(
        self, async_http_client: AsyncClient, signup: Callable[..., Any]
    ) -> None:
        """Test that the new name and timezone are stored and served by /me."""
        # Arrange
        _, headers = await signup(name="Ada")

        # Act
        response = await async_http_client.put(
            "/api/auth/profile",
            json={"name": "Ada Lovelace", "timezone": "Asia/Tokyo"},
            headers=headers,
        )
        me = await async_http_client.get("/api/auth/me", headers=headers)

        # Assert
        assert response.status_code == status.HTTP_200_OK
        user = UserEnvelope.model_validate(response.json()).user
        assert (user.name, user.timezone) == ("Ada Lovelace", "Asia/Tokyo")
        assert me.json()["user"]["timezone"] == "Asia/Tokyo"

    @pytest.mark.asyncio
    async def test_blank_name_is_cleared(
        self, async_http_client: AsyncClient, signup: Callable[..., Any]
    ) -> None:
        """Test that an empty name removes the display name."""
        _, headers = await signup(name="Ada")

        response = await async_http_client.put(
            "/api/auth/profile", json={"name": "  ", "timezone": "UTC"}, headers=headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["name"] is None

    @pytest.mark.asyncio
    async def test_unknown_timezone_is_rejected(
        self, async_http_client: AsyncClient, signup: Callable[..., Any]
    ) -> None:
        """Test that a timezone outside the IANA database returns 400 and changes nothing."""
        # Arrange
        _, headers = await signup(timezone="Europe/Paris")

        # Act
        response = await async_http_client.put(
            "/api/auth/profile",
            json={"name": "Ada", "timezone": "Mars/Olympus_Mons"},
            headers=headers,
        )
        me = await async_http_client.get("/api/auth/me", headers=headers)

        # Assert
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        payload = response.json()
        assert payload["error"] == "bad_request"
        assert payload["message"].startswith("timezone: ")
        assert me.json()["user"]["timezone"] == "Europe/Paris"

    @pytest.mark.asyncio
    async def test_signup_rejects_unknown_timezone(self, async_http_client: AsyncClient) -> None:
        """Test that sign-up applies the same timezone check."""
        response = await async_http_client.post(
            "/api/auth/signup",
            json={
                "email": "ada@example.com",
                "password": "Password123!",
                "timezone": "Not/AZone",
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_update_profile_requires_token(self, async_http_client: AsyncClient) -> None:
        """Test that anonymous profile updates are refused."""
        response = await async_http_client.put(
            "/api/auth/profile", json={"name": "Ada", "timezone": "UTC"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
