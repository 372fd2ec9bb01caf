"""
Custom HTTP exceptions with error codes.

Services raise these; the handlers in common.utils.exception_handlers
render them with the shared error envelope. Each subclass only declares
its status, default code and default message.

Example:
    from common.utils import NotFoundException

    async def find_one(self, user_id: str) -> dict:
        user = await self._users_collection.find_one({"_id": ObjectId(user_id)})
        if not user:
            raise NotFoundException(f"User with ID {user_id} not found", code="USER_NOT_FOUND")
        return user
"""

from typing import Optional, Any, Dict
from fastapi import HTTPException


class APIException(HTTPException):
    """
    Base API exception with error code support.

    The HTTP detail is a dict of message, code and (optionally) details,
    which the exception handlers unpack into the error envelope.
    """

    default_status: int = 500
    default_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"
    default_headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Create an API exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details (e.g. the offending field)
            status_code: Overrides the class's HTTP status
            headers: Overrides the class's response headers
        """
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details

        detail: Dict[str, Any] = {"message": self.message, "code": self.code}
        if details is not None:
            detail["details"] = details

        super().__init__(
            status_code=status_code or self.default_status,
            detail=detail,
            headers=headers or self.default_headers,
        )


class BadRequestException(APIException):
    """400 Bad Request - Invalid input or malformed identifier."""

    default_status = 400
    default_code = "BAD_REQUEST"
    default_message = "Bad request"


class UnauthorizedException(APIException):
    """401 Unauthorized - Missing or invalid credentials or token."""

    default_status = 401
    default_code = "UNAUTHORIZED"
    default_message = "Unauthorized"
    default_headers = {"WWW-Authenticate": "Bearer"}


class NotFoundException(APIException):
    """404 Not Found - User or profile doesn't exist."""

    default_status = 404
    default_code = "NOT_FOUND"
    default_message = "Not found"


class ConflictException(APIException):
    """409 Conflict - Email or username already in use."""

    default_status = 409
    default_code = "CONFLICT"
    default_message = "Conflict"


class InternalServerException(APIException):
    """500 Internal Server Error - A store write failed."""
