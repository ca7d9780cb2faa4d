from __future__ import annotations

import re
from typing import Final

from pydantic import Field, PostgresDsn, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from creatorpulse.core.settings_errors import InvalidSettingsError, MissingRequiredSettingsError

_MIN_JWT_SECRET_LENGTH: Final[int] = 32
_JWT_SECRET_CHARACTER_CLASSES: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
    re.compile(r"[^\w\s]"),
)


def is_strong_jwt_secret(secret: str) -> bool:
    if len(secret) < _MIN_JWT_SECRET_LENGTH:
        return False
    return all(pattern.search(secret) for pattern in _JWT_SECRET_CHARACTER_CLASSES)


class Settings(BaseSettings):
    """Application settings read from the environment and an optional `.env` file.

    Fields declared with `...` have no default and must be provided; everything
    else falls back to a value suitable for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "creatorpulse-api"
    environment: str = "local"
    log_level: str = "INFO"

    # Database
    postgres_user: str = Field(..., description="Postgres user (required)")
    postgres_password: str = Field(..., description="Postgres password (required)")
    postgres_host: str = Field(..., description="Postgres host (required)")
    postgres_port: int = Field(..., description="Postgres port (required)")
    postgres_db: str = Field(..., description="Postgres database name (required)")
    database_url: PostgresDsn | None = Field(
        default=None,
        description="Full connection URL; built from the postgres_* fields when unset",
    )
    db_echo: bool = False
    db_pool_size: int = Field(default=5, gt=0)
    db_max_overflow: int = Field(default=10, ge=0)

    # Authentication
    jwt_secret_key: str = Field(..., description="JWT secret key for token signing (required)")
    jwt_access_token_expire_minutes: int = Field(
        ..., description="JWT token expiration in minutes (required)"
    )
    jwt_algorithm: str = "HS256"

    # Rate limiting
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    rate_limit_storage_url: str | None = Field(
        default=None,
        description="limits storage URI; built from the redis_* fields when unset",
    )
    rate_limit_enabled: bool = True

    # Text generation
    openai_api_key: str = Field(..., description="OpenAI API key (required)")
    llm_model: str = "gpt-4o-mini"
    llm_base_url: str | None = Field(
        default=None,
        description="Base URL of an OpenAI-compatible completion API (defaults to OpenAI)",
    )
    trend_prompt_max_chars: int = Field(default=12_000, gt=0)

    # Email delivery
    resend_api_key: str = Field(..., description="Resend API key for outbound email (required)")
    email_from: str = "CreatorPulse <newsletter@creatorpulse.app>"
    resend_api_url: str = "https://api.resend.com/emails"

    # Source fetching
    social_feed_url_template: str = "https://nitter.net/{handle}/rss"
    video_feed_url_template: str = (
        "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"
    )
    feed_fetch_timeout_seconds: float = Field(default=15.0, gt=0)

    # Scheduled jobs
    scheduler_enabled: bool = True
    newsletter_delivery_hour: int = Field(default=8, ge=0, le=23)

    @model_validator(mode="after")
    def build_derived_urls(self) -> Settings:
        if self.database_url is None:
            self.database_url = PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.postgres_user,
                password=self.postgres_password,
                host=self.postgres_host,
                port=self.postgres_port,
                path=self.postgres_db,
            )
        if self.rate_limit_storage_url is None:
            self.rate_limit_storage_url = (
                f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"
            )
        return self

    @model_validator(mode="after")
    def validate_jwt_secret_strength(self) -> Settings:
        if not is_strong_jwt_secret(self.jwt_secret_key):
            raise ValueError(
                f"JWT secret key must be at least {_MIN_JWT_SECRET_LENGTH} characters and "
                "include upper, lower, number, and symbol characters."
            )
        return self

    @model_validator(mode="after")
    def validate_feed_templates(self) -> Settings:
        if "{handle}" not in self.social_feed_url_template:
            raise ValueError("Social feed URL template must contain a {handle} placeholder.")
        if "{channel_id}" not in self.video_feed_url_template:
            raise ValueError("Video feed URL template must contain a {channel_id} placeholder.")
        return self


def _classify_errors(error: ValidationError) -> tuple[list[str], list[tuple[str, str]]]:
    """Split validation errors into missing env var names and (field, message) pairs."""
    missing: list[str] = []
    invalid: list[tuple[str, str]] = []
    for detail in error.errors():
        location = detail.get("loc", ())
        if detail["type"] == "missing":
            missing.append(str(location[0]).upper() if location else "UNKNOWN")
        else:
            field_path = ".".join(str(part) for part in location) or "unknown"
            invalid.append((field_path, detail.get("msg", "Invalid value")))
    return missing, invalid


def validate_settings() -> Settings:
    """Load settings, translating pydantic errors into startup-friendly exceptions.

    Missing variables take precedence: when any are absent, invalid values are
    not reported until the environment is complete.

    Raises:
        MissingRequiredSettingsError: If required environment variables are missing.
        InvalidSettingsError: If environment variables hold invalid values.
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        missing, invalid = _classify_errors(exc)
        if missing:
            raise MissingRequiredSettingsError(missing) from exc
        if invalid:
            raise InvalidSettingsError(invalid) from exc
        raise


# Loaded at import time; creatorpulse.main reports failures before the app is built.
settings = validate_settings()
