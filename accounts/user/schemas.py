"""
Pydantic models for User request validation.
"""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator

from accounts.profile.schemas import CreateProfileRequest, UpdateProfileRequest


class CreateUserRequest(BaseModel):
    """Request body for creating a user (with its profile)."""
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=8, max_length=128)
    profile: CreateProfileRequest

    @field_validator("email", "username", mode="before")
    @classmethod
    def strip_identity(cls, value):
        # The password is hashed exactly as typed
        return value.strip() if isinstance(value, str) else value


class UpdateUserRequest(BaseModel):
    """Request body for updating a user. Only provided fields are changed."""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    email: Optional[EmailStr] = None
    username: Optional[str] = Field(None, min_length=3, max_length=30)
    isActive: Optional[bool] = None
    profile: Optional[UpdateProfileRequest] = None


class QueryUsersParams(BaseModel):
    """Query string for listing users."""
    model_config = ConfigDict(extra="forbid")

    search: Optional[str] = Field(None, max_length=100)
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sortBy: Literal["createdAt", "email", "username"] = "createdAt"
    sortOrder: Literal["asc", "desc"] = "desc"
