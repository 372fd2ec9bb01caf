"""
FastAPI router for User endpoints.

All routes require a valid bearer token.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from accounts.dependencies import get_directory_service, get_user_service, require_auth
from accounts.profile.schemas import UpdateProfileRequest
from accounts.user.schemas import CreateUserRequest, QueryUsersParams, UpdateUserRequest
from accounts.user.services.directory_service import DirectoryService
from accounts.user.services.user_service import UserService
from common.utils import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_auth)])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: CreateUserRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Create a user together with its profile."""
    user = await user_service.create(
        email=body.email,
        username=body.username,
        password=body.password,
        profile=body.profile.model_dump(),
    )
    return success_response(user, message="User created successfully")


@router.get("")
async def list_users(
    params: Annotated[QueryUsersParams, Query()],
    directory_service: Annotated[DirectoryService, Depends(get_directory_service)],
):
    """
    List users with search, sorting and pagination.

    search matches email, username, and the profile's first name,
    last name and bio.
    """
    result = await directory_service.find_all(
        search=params.search,
        page=params.page,
        limit=params.limit,
        sort_by=params.sortBy,
        sort_order=params.sortOrder,
    )
    return success_response(result)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Get a user with its profile."""
    return success_response(await user_service.find_one(user_id))


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """
    Update a user.

    Only provided fields are changed. A nested "profile" object updates
    the linked profile.
    """
    user = await user_service.update(user_id, body.model_dump(exclude_unset=True))
    return success_response(user, message="User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Delete a user and its profile."""
    result = await user_service.remove(user_id)
    return success_response({"id": result["id"]}, message=result["message"])


@router.get("/{user_id}/profile")
async def get_user_profile(
    user_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Get the profile linked to a user."""
    return success_response(await user_service.get_profile(user_id))


@router.patch("/{user_id}/profile")
async def update_user_profile(
    user_id: str,
    body: UpdateProfileRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Update the profile linked to a user."""
    profile = await user_service.update_profile(user_id, body.model_dump(exclude_unset=True))
    return success_response(profile, message="Profile updated successfully")
