"""
Pydantic models for Profile request validation.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateProfileRequest(BaseModel):
    """Profile fields supplied at creation (standalone or at sign-up)."""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    firstName: str = Field(..., min_length=2, max_length=50)
    lastName: str = Field(..., min_length=2, max_length=50)
    avatar: Optional[str] = Field(None, max_length=2048, description="Avatar image URL")
    bio: Optional[str] = Field(None, max_length=500)
    phoneNumber: Optional[str] = Field(None, max_length=30)
    country: Optional[str] = Field(None, max_length=100)


class UpdateProfileRequest(BaseModel):
    """Request body for updating a profile. Only provided fields are changed."""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    firstName: Optional[str] = Field(None, min_length=2, max_length=50)
    lastName: Optional[str] = Field(None, min_length=2, max_length=50)
    avatar: Optional[str] = Field(None, max_length=2048)
    bio: Optional[str] = Field(None, max_length=500)
    phoneNumber: Optional[str] = Field(None, max_length=30)
    country: Optional[str] = Field(None, max_length=100)

    @field_validator("firstName", "lastName")
    @classmethod
    def reject_null_name(cls, value):
        # Omit a name to keep it; it can never be cleared
        if value is None:
            raise ValueError("may not be null")
        return value
