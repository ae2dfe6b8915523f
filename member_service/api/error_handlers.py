# This file defines consistent API error payloads and exception handlers.
# Every endpoint returns the same error shape with request trace fields.
# Member domain errors map to fixed status codes; driver failures become a generic 500.
# Stack traces are logged server-side and never returned to clients.

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from member_service.members.errors import (
    DuplicateEntryError,
    IntegrityViolationError,
    MemberError,
    NotFoundError,
    ValidationError,
)

LOGGER = logging.getLogger("members")

# Ordered most specific first; the first isinstance match wins.
MEMBER_ERROR_STATUS: tuple[tuple[type[MemberError], int, str], ...] = (
    (NotFoundError, 404, "NOT_FOUND"),
    (ValidationError, 400, "INVALID_REQUEST"),
    (DuplicateEntryError, 409, "DUPLICATE_ENTRY"),
    (IntegrityViolationError, 500, "INTEGRITY_VIOLATION"),
)


class APIError(Exception):
    """Domain error type with structured API details."""

    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        details: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def _error_body(
    *, request: Request, error_code: str, message: str, details: Any | None = None
) -> dict[str, Any]:
    return {
        "error_code": error_code,
        "message": message,
        "details": details,
        "request_id": _request_id(request),
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }


def member_error_status(exc: MemberError) -> tuple[int, str]:
    for error_type, status_code, error_code in MEMBER_ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code, error_code
    return 500, "MEMBER_ERROR"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                request=request,
                error_code=exc.error_code,
                message=exc.message,
                details=exc.details,
            ),
        )

    @app.exception_handler(MemberError)
    async def member_error_handler(request: Request, exc: MemberError) -> JSONResponse:
        status_code, error_code = member_error_status(exc)
        if status_code >= 500:
            LOGGER.error("Member operation failed on %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=status_code,
            content=_error_body(request=request, error_code=error_code, message=exc.message),
        )

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        LOGGER.error("Storage failure on %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request=request,
                error_code="STORAGE_ERROR",
                message="The member store could not complete the request.",
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=_error_body(
                request=request,
                error_code="VALIDATION_ERROR",
                message="Invalid request parameters.",
                details=exc.errors(),
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                request=request,
                error_code="HTTP_ERROR",
                message=str(exc.detail),
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.error("Unhandled error on %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request=request,
                error_code="INTERNAL_SERVER_ERROR",
                message="The server encountered an unexpected error.",
            ),
        )
