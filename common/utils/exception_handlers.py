"""
Exception handlers for FastAPI applications.

Renders every failure with the same envelope:

    {
        "success": false,
        "statusCode": 404,
        "timestamp": "2026-01-01T12:00:00+00:00",
        "path": "/users/65f0...",
        "method": "GET",
        "error": "Not Found",
        "code": "USER_NOT_FOUND",
        "message": "User with ID 65f0... not found"
    }

Store internals and stack traces are logged, never returned.
"""

import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Optional, Union, List

from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def build_error_body(
    request: Request,
    status_code: int,
    message: Union[str, List[str]],
    code: Optional[str] = None,
    details: Optional[Any] = None,
) -> dict:
    """Build the uniform error envelope for a request."""
    body = {
        "success": False,
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
        "error": _reason_phrase(status_code),
        "code": code,
        "message": message,
    }
    if details is not None:
        body["details"] = details
    return body


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    if location:
        return f"{location}: {error.get('msg')}"
    return str(error.get("msg"))


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle APIException subclasses and plain HTTP exceptions."""
        detail = exc.detail
        if isinstance(detail, dict):
            message = detail.get("message", _reason_phrase(exc.status_code))
            code = detail.get("code")
            details = detail.get("details")
        else:
            message = detail if detail else _reason_phrase(exc.status_code)
            code = None
            details = None

        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {message}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {message}")

        return JSONResponse(
            status_code=exc.status_code,
            content=build_error_body(request, exc.status_code, message, code, details),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle pydantic request validation errors as 400 with a list of messages."""
        messages = [_format_validation_error(error) for error in exc.errors()]
        logger.info(f"Validation failed for {request.method} {request.url.path}: {messages}")
        return JSONResponse(
            status_code=400,
            content=build_error_body(request, 400, messages, "VALIDATION_ERROR"),
        )

    @app.exception_handler(InvalidId)
    async def invalid_id_handler(request: Request, exc: InvalidId) -> JSONResponse:
        """Handle malformed ObjectIds that slipped past service validation."""
        return JSONResponse(
            status_code=400,
            content=build_error_body(request, 400, "Invalid ID", "INVALID_ID"),
        )

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_key_handler(
        request: Request, exc: DuplicateKeyError
    ) -> JSONResponse:
        """Handle unique index violations that escaped the service layer."""
        logger.warning(f"Duplicate key on {request.method} {request.url.path}: {exc.details}")
        return JSONResponse(
            status_code=409,
            content=build_error_body(
                request, 409, "Duplicate value for unique field", "DUPLICATE_KEY"
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: "
            f"{type(exc).__name__}: {exc}",
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=build_error_body(request, 500, "Internal server error", "INTERNAL_ERROR"),
        )
