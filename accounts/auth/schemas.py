"""
Pydantic models for Auth request validation.

Passwords are taken exactly as typed; only identity fields are trimmed.
"""

from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator

from accounts.profile.schemas import CreateProfileRequest


class SignUpRequest(BaseModel):
    """Request body for user registration."""
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=8, max_length=128)
    profile: CreateProfileRequest

    @field_validator("email", "username", mode="before")
    @classmethod
    def strip_identity(cls, value):
        return value.strip() if isinstance(value, str) else value


class SignInRequest(BaseModel):
    """Request body for sign-in."""
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def strip_identity(cls, value):
        return value.strip() if isinstance(value, str) else value
