"""
Utilities module - Common helpers for API responses and exceptions.
"""

from common.utils.responses import success_response
from common.utils.exceptions import (
    APIException,
    BadRequestException,
    UnauthorizedException,
    NotFoundException,
    ConflictException,
    InternalServerException,
)
from common.utils.exception_handlers import setup_exception_handlers

__all__ = [
    "success_response",
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "NotFoundException",
    "ConflictException",
    "InternalServerException",
    "setup_exception_handlers",
]
