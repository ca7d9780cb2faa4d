"""Uniform `{error, message, details?}` bodies for every failed request."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)

_ERROR_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    429: "rate_limited",
    500: "internal_error",
    503: "service_unavailable",
}
_REQUEST_PARTS = frozenset({"body", "query", "path"})


class ErrorResponse(BaseModel):
    """Standardized error response payload."""

    error: str
    message: str
    details: Any | None = None


def error_body(
    status_code: int,
    message: str | None = None,
    *,
    error: str | None = None,
    details: Any | None = None,
) -> dict[str, Any]:
    """Build the payload, defaulting the code and message from the HTTP status."""
    if message is None:
        try:
            message = HTTPStatus(status_code).phrase
        except ValueError:
            message = "Error"
    return ErrorResponse(
        error=error or _ERROR_CODES.get(status_code, "error"),
        message=message,
        details=details,
    ).model_dump(exclude_none=True)


def build_http_error(
    status_code: int,
    error: str,
    message: str,
    details: Any | None = None,
    headers: dict[str, str] | None = None,
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=error_body(status_code, message, error=error, details=details),
        headers=headers,
    )


def _error_response(
    status_code: int, body: dict[str, Any], headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _summarize_validation_errors(errors: list[Any]) -> tuple[str, list[dict[str, Any]]]:
    """Return a `field: message` summary of the first error and a JSON-safe error list.

    Pydantic may put exception objects in `ctx`; only loc, msg and type are kept.
    """
    details = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": str(error.get("msg", "")),
            "type": str(error.get("type", "")),
        }
        for error in errors
    ]
    if not details:
        return "Request validation failed", details
    first = details[0]
    field = ".".join(part for part in first["loc"] if part not in _REQUEST_PARTS)
    message = first["msg"] or "Invalid value"
    return (f"{field}: {message}" if field else message), details


def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, StarletteHTTPException):
        return unhandled_exception_handler(request, exc)
    detail = exc.detail
    if isinstance(detail, dict) and {"error", "message"} <= detail.keys():
        body = ErrorResponse.model_validate(detail).model_dump(exclude_none=True)
    else:
        body = error_body(exc.status_code, str(detail) if detail else None)
    return _error_response(exc.status_code, body, getattr(exc, "headers", None))


def request_validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, RequestValidationError):
        return unhandled_exception_handler(request, exc)
    message, details = _summarize_validation_errors(list(exc.errors()))
    return _error_response(
        HTTP_400_BAD_REQUEST, error_body(HTTP_400_BAD_REQUEST, message, details=details)
    )


def rate_limit_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(
        HTTP_429_TOO_MANY_REQUESTS,
        error_body(HTTP_429_TOO_MANY_REQUESTS, "Too many requests"),
        getattr(exc, "headers", None),
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc
    )
    return _error_response(
        HTTP_500_INTERNAL_SERVER_ERROR, error_body(HTTP_500_INTERNAL_SERVER_ERROR)
    )
