"""
Authentication module - Token issuing, password hashing, and the auth guard.
"""

from common.auth.base import TokenProvider
from common.auth.jwt_auth import JWTAuth
from common.auth.password_hasher import PasswordHasher
from common.auth.dependencies import create_auth_dependency

__all__ = ["TokenProvider", "JWTAuth", "PasswordHasher", "create_auth_dependency"]
