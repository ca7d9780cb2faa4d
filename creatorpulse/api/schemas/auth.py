from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _check_bcrypt_length(value: str) -> str:
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password must not exceed 72 bytes when UTF-8 encoded")
    return value


def _check_timezone(value: str | None) -> str | None:
    if value is None:
        return value
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown IANA timezone: {value}") from None
    return value


class SignUpRequest(BaseModel):
    """Request model for account creation."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "email": "alex@example.com",
                    "password": "Password123!",
                    "name": "Alex",
                    "timezone": "Europe/Berlin",
                }
            ]
        }
    )

    email: EmailStr = Field(..., max_length=320, examples=["alex@example.com"])
    password: str = Field(
        ...,
        min_length=8,
        max_length=50,
        description="Password between 8 and 50 characters",
        examples=["Password123!"],
    )
    name: str | None = Field(default=None, max_length=200, examples=["Alex"])
    timezone: str | None = Field(
        default=None,
        max_length=64,
        description="IANA timezone used to date newsletters; defaults to UTC",
        examples=["Europe/Berlin"],
    )

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Keep under bcrypt's 72-byte limit even with multi-byte characters."""
        return _check_bcrypt_length(v)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        return _check_timezone(v)


class SignInRequest(BaseModel):
    """Request model for sign-in."""

    email: EmailStr = Field(..., max_length=320, examples=["alex@example.com"])
    password: str = Field(..., min_length=1, max_length=50, examples=["Password123!"])

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_bcrypt_length(v)


class ProfileUpdateRequest(BaseModel):
    """Replaces the display name and timezone of the signed-in user."""

    name: str | None = Field(default=None, max_length=200, examples=["Alex"])
    timezone: str = Field(..., max_length=64, examples=["America/New_York"])

    @field_validator("name")
    @classmethod
    def blank_name_clears(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        _check_timezone(v)
        return v


class SessionResponse(BaseModel):
    """Bearer token issued on sign-up and sign-in."""

    access_token: str = Field(..., examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."])
    token_type: str = Field("bearer", examples=["bearer"])
    expires_at: datetime


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., examples=[123])
    email: str = Field(..., examples=["alex@example.com"])
    name: str | None = None
    timezone: str = "UTC"
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    user: UserResponse
    session: SessionResponse


class UserEnvelope(BaseModel):
    user: UserResponse
