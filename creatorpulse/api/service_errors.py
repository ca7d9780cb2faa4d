"""Translate service-layer exceptions into the standard error payload."""

from __future__ import annotations

from fastapi import HTTPException, status

from creatorpulse.core.errors import build_http_error
from creatorpulse.services.errors import ResourceNotFoundError, ServiceError
from creatorpulse.services.newsletter_service import NewsletterAlreadySentError


def service_http_error(exc: ServiceError) -> HTTPException:
    if isinstance(exc, ResourceNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, NewsletterAlreadySentError):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return build_http_error(status_code=status_code, error=exc.error_code, message=str(exc))
