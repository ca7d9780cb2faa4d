"""Startup configuration errors.

Kept apart from `creatorpulse.core.config` so they can be caught around the
import that loads the settings.
"""

from __future__ import annotations


class SettingsError(Exception):
    """Base class for configuration problems detected at startup."""

    def report_lines(self) -> list[str]:
        return [str(self)]


class MissingRequiredSettingsError(SettingsError):
    """Raised when required environment variables are not set."""

    def __init__(self, missing_fields: list[str]) -> None:
        self.missing_fields = missing_fields
        super().__init__(f"Missing required environment variables: {', '.join(missing_fields)}")

    def report_lines(self) -> list[str]:
        return [
            "ERROR: Missing required environment variables:",
            *(f"  - {field}" for field in self.missing_fields),
            "",
            "Please set these in your .env file (see env.example for reference)",
        ]


class InvalidSettingsError(SettingsError):
    """Raised when environment variables are set but hold unusable values."""

    def __init__(self, invalid_fields: list[tuple[str, str]]) -> None:
        self.invalid_fields = invalid_fields
        summary = ", ".join(f"{field}: {message}" for field, message in invalid_fields)
        super().__init__(f"Invalid environment variables: {summary}")

    def report_lines(self) -> list[str]:
        return [
            "ERROR: Invalid environment variable values:",
            *(f"  - {field}: {message}" for field, message in self.invalid_fields),
            "",
            "Please update these in your .env file (see env.example for reference)",
        ]
