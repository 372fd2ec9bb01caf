"""
FastAPI router for standalone Profile endpoints.

Administrative surface: profiles created or deleted here are not
coordinated with any user.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from accounts.dependencies import get_profile_service
from accounts.profile.schemas import CreateProfileRequest, UpdateProfileRequest
from accounts.profile.services.profile_service import ProfileService
from common.utils import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_profile(
    body: CreateProfileRequest,
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Create a profile with no owning user."""
    profile = await profile_service.create(body.model_dump())
    return success_response(profile, message="Profile created successfully")


@router.get("")
async def list_profiles(
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """List all profiles."""
    return success_response(await profile_service.find_all())


@router.get("/{profile_id}")
async def get_profile(
    profile_id: str,
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Get a profile by id."""
    return success_response(await profile_service.find_one(profile_id))


@router.patch("/{profile_id}")
async def update_profile(
    profile_id: str,
    body: UpdateProfileRequest,
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Update a profile. Only provided fields are changed."""
    profile = await profile_service.update(profile_id, body.model_dump(exclude_unset=True))
    return success_response(profile, message="Profile updated successfully")


@router.delete("/{profile_id}")
async def delete_profile(
    profile_id: str,
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Delete a profile."""
    result = await profile_service.remove(profile_id)
    return success_response({"id": result["id"]}, message=result["message"])
