"""
Common library for reusable infrastructure components.

This package provides generic modules that are not tied to the
accounts domain:

- database: Async MongoDB connection with Beanie ODM, unit of work
- auth: Token provider (JWT), password hashing, auth guard factory
- middleware: Request logging
- utils: Standard responses, exceptions, exception handlers
- config: Base settings class
"""

from common.database import MongoDB, BaseDocument, MongoUnitOfWork
from common.auth import TokenProvider, JWTAuth, PasswordHasher, create_auth_dependency
from common.middleware import RequestLoggingMiddleware
from common.utils import (
    success_response,
    APIException,
    BadRequestException,
    UnauthorizedException,
    NotFoundException,
    ConflictException,
    InternalServerException,
    setup_exception_handlers,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    "BaseDocument",
    "MongoUnitOfWork",
    # Auth
    "TokenProvider",
    "JWTAuth",
    "PasswordHasher",
    "create_auth_dependency",
    # Middleware
    "RequestLoggingMiddleware",
    # Utils
    "success_response",
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "NotFoundException",
    "ConflictException",
    "InternalServerException",
    "setup_exception_handlers",
    # Config
    "BaseAppSettings",
]
