"""
FastAPI router for Auth system endpoints.

Provides sign-up and sign-in. Both return a freshly issued token.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from accounts.auth import pipelines
from accounts.auth.schemas import SignInRequest, SignUpRequest
from accounts.dependencies import (
    get_password_hasher,
    get_token_provider,
    get_user_service,
)
from accounts.user.services.user_service import UserService
from common.auth import PasswordHasher, TokenProvider
from common.utils import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def sign_up(
    body: SignUpRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
    token_provider: Annotated[TokenProvider, Depends(get_token_provider)],
):
    """
    Register a new user account.

    Creates the user and its profile, then returns an access token.
    """
    result = await pipelines.sign_up_pipeline(
        user_service=user_service,
        token_provider=token_provider,
        email=body.email,
        username=body.username,
        password=body.password,
        profile=body.profile.model_dump(),
    )
    return success_response(
        {"user": result["user"], "token": result["token"]},
        message=result["message"],
    )


@router.post("/signin")
async def sign_in(
    body: SignInRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    token_provider: Annotated[TokenProvider, Depends(get_token_provider)],
):
    """
    Sign in with email and password.
    """
    result = await pipelines.sign_in_pipeline(
        user_service=user_service,
        password_hasher=password_hasher,
        token_provider=token_provider,
        email=body.email,
        password=body.password,
    )
    return success_response(
        {"user": result["user"], "token": result["token"]},
        message=result["message"],
    )
