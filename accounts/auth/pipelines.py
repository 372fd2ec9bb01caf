"""
Auth system pipeline functions.

Stateless orchestration logic for sign-up and sign-in.
"""

import logging
from typing import TYPE_CHECKING

from common.auth.base import TokenProvider
from common.auth.password_hasher import PasswordHasher
from common.utils.exceptions import ConflictException, UnauthorizedException

if TYPE_CHECKING:
    from accounts.user.services.user_service import UserService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def _invalid_credentials() -> UnauthorizedException:
    # Same error for unknown email and wrong password, so callers cannot
    # probe which emails are registered.
    return UnauthorizedException(
        message=INVALID_CREDENTIALS_MESSAGE,
        code="INVALID_CREDENTIALS",
    )


async def _issue_token(token_provider: TokenProvider, user: dict) -> str:
    return await token_provider.create_token(
        user_id=str(user["id"]),
        email=user["email"],
        username=user["username"],
    )


async def sign_up_pipeline(
    user_service: "UserService",
    token_provider: TokenProvider,
    email: str,
    username: str,
    password: str,
    profile: dict,
) -> dict:
    """
    Orchestrates the registration flow.

    Args:
        user_service: Creates the user and its profile
        token_provider: Issues the access token
        email: New user's email
        username: New user's username
        password: Plaintext password
        profile: Initial profile fields

    Returns:
        dict with user (no password hash), token and message

    Raises:
        ConflictException: Email or username already registered
        InternalServerException: User/profile creation failed
    """
    existing_user = await user_service.find_by_email(email)
    if existing_user:
        raise ConflictException(
            message="User already exists",
            code="USER_ALREADY_EXISTS",
            details={"field": "email"},
        )

    user = await user_service.create(
        email=email,
        username=username,
        password=password,
        profile=profile,
    )

    token = await _issue_token(token_provider, user)

    logger.info(f"User signed up: {user['id']}")

    return {
        "user": user,
        "token": token,
        "message": "User registered successfully",
    }


async def sign_in_pipeline(
    user_service: "UserService",
    password_hasher: PasswordHasher,
    token_provider: TokenProvider,
    email: str,
    password: str,
) -> dict:
    """
    Orchestrates the sign-in flow.

    Args:
        user_service: For the user lookup
        password_hasher: Checks the password against the stored hash
        token_provider: Issues the access token
        email: Email as typed by the user
        password: Plaintext password

    Returns:
        dict with user (no password hash), token and message

    Raises:
        UnauthorizedException: Unknown email or wrong password
    """
    user_doc = await user_service.find_by_email(email)

    if not user_doc:
        logger.info("Sign-in rejected: unknown email")
        raise _invalid_credentials()

    if not await password_hasher.verify(password, user_doc.get("passwordHash", "")):
        logger.info(f"Sign-in rejected: wrong password for user {user_doc['_id']}")
        raise _invalid_credentials()

    user = await user_service.find_one(str(user_doc["_id"]))
    token = await _issue_token(token_provider, user)

    logger.info(f"User signed in: {user['id']}")

    return {
        "user": user,
        "token": token,
        "message": "Signed in successfully",
    }
