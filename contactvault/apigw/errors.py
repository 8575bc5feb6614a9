"""Standardized API error handling with error envelopes.

Every error response carries the envelope `{"code", "message", "trace_id", "details"?}`. Domain
exceptions (calendar engine, vault gate, missing records) are mapped to HTTP statuses here so that
routes can let them propagate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from contactvault.core.http_constants import (
    DEFAULT_ERROR_CODES,
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_UNAUTHORIZED,
    REQUEST_ID_HEADER,
    TRACE_ID_HEADER,
)
from contactvault.domain.calendar.errors import CalendarError, NoRecurrenceFound
from contactvault.domain.errors import ConflictError, NotFoundError
from contactvault.domain.permissions import VaultAccessError

log = logging.getLogger(__name__)


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None
    details: dict[str, Any] | None = None


class APIError(HTTPException):
    """Custom API error with standard envelope."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize an API error with standardized envelope."""
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.message = message
        self.trace_id = trace_id
        self.details = details


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    trace_id: str | None = None,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    envelope = ErrorEnvelope(code=code, message=message, trace_id=trace_id, details=details)
    return JSONResponse(
        status_code=status_code,
        content={
            "code": envelope.code,
            "message": envelope.message,
            "trace_id": envelope.trace_id,
            **({"details": envelope.details} if envelope.details else {}),
        },
        headers=headers,
    )


def extract_trace_id(request: Request) -> str | None:
    """Extract trace ID from request headers or request state."""
    trace_id = request.headers.get(TRACE_ID_HEADER) or request.headers.get(REQUEST_ID_HEADER)
    if trace_id:
        return trace_id
    return getattr(request.state, "request_id", None)


def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions with standard envelope."""
    trace_id = extract_trace_id(request) or exc.trace_id
    log.info(
        "API error occurred",
        extra={
            "code": exc.code,
            "error_message": exc.message,
            "status_code": exc.status_code,
            "trace_id": trace_id,
        },
    )
    return create_error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        trace_id=trace_id,
        details=exc.details,
        headers=getattr(exc, "headers", None),
    )


def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle FastAPI HTTPException with standard envelope."""
    code = DEFAULT_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return create_error_response(
        status_code=exc.status_code,
        code=code,
        message=str(exc.detail),
        trace_id=extract_trace_id(request),
        headers=getattr(exc, "headers", None),
    )


def handle_calendar_error(request: Request, exc: CalendarError) -> JSONResponse:
    """Calendar engine errors: 400 for bad input, 500 when no recurrence could be found."""
    trace_id = extract_trace_id(request)
    if isinstance(exc, NoRecurrenceFound):
        log.error(
            "Recurrence resolution failed",
            extra={"code": exc.code, "error_message": str(exc), "trace_id": trace_id},
        )
        return create_error_response(HTTP_INTERNAL_SERVER_ERROR, exc.code, str(exc), trace_id)
    return create_error_response(HTTP_BAD_REQUEST, exc.code, str(exc), trace_id)


def handle_vault_access_error(request: Request, exc: VaultAccessError) -> JSONResponse:
    return create_error_response(
        exc.status_code, exc.code, str(exc), extract_trace_id(request)
    )


def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return create_error_response(HTTP_NOT_FOUND, exc.code, str(exc), extract_trace_id(request))


def handle_conflict(request: Request, exc: ConflictError) -> JSONResponse:
    return create_error_response(HTTP_CONFLICT, exc.code, str(exc), extract_trace_id(request))


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions with standard envelope."""
    trace_id = extract_trace_id(request)
    log.error(
        "Unexpected error occurred",
        extra={
            "code": "INTERNAL_ERROR",
            "trace_id": trace_id,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=True,
    )
    return create_error_response(
        status_code=HTTP_INTERNAL_SERVER_ERROR,
        code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        trace_id=trace_id,
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register every envelope handler on `app`."""
    app.add_exception_handler(APIError, handle_api_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(CalendarError, handle_calendar_error)
    app.add_exception_handler(VaultAccessError, handle_vault_access_error)
    app.add_exception_handler(NotFoundError, handle_not_found)
    app.add_exception_handler(ConflictError, handle_conflict)
    app.add_exception_handler(Exception, handle_generic_exception)


# Convenience functions for common errors
def unauthorized(code: str, message: str | None = None) -> APIError:
    """Create a 401 Unauthorized error."""
    return APIError(HTTP_UNAUTHORIZED, code, message or code)


def conflict(code: str, message: str | None = None) -> APIError:
    """Create a 409 Conflict error."""
    return APIError(HTTP_CONFLICT, code, message or code)
