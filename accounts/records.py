"""
Helpers for turning stored documents into caller-facing records.

Every user record leaving the service layer goes through serialize_user,
which never copies the password hash.
"""

from typing import Optional

from bson import ObjectId

from common.utils.exceptions import BadRequestException

PROFILE_FIELDS = ("firstName", "lastName", "avatar", "bio", "phoneNumber", "country")
REQUIRED_PROFILE_FIELDS = ("firstName", "lastName")
USER_FIELDS = ("email", "username", "isActive")


def parse_object_id(value: str) -> ObjectId:
    """
    Convert a path identifier into an ObjectId.

    Raises:
        BadRequestException: value is not a valid ObjectId
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise BadRequestException(message="Invalid ID", code="INVALID_ID")
    return ObjectId(value)


def normalize_identity(value: Optional[str]) -> Optional[str]:
    """Trim and lowercase an email or username."""
    if value is None:
        return None
    return value.strip().lower()


def _str_id(value) -> Optional[str]:
    return str(value) if value is not None else None


def serialize_profile(profile: Optional[dict]) -> Optional[dict]:
    """Format a profile document for API responses."""
    if profile is None:
        return None
    record = {"id": str(profile["_id"])}
    for field in PROFILE_FIELDS:
        record[field] = profile.get(field)
    record["user"] = _str_id(profile.get("user"))
    record["createdAt"] = profile.get("createdAt")
    record["updatedAt"] = profile.get("updatedAt")
    return record


def serialize_user(user: dict, profile: Optional[dict] = None) -> dict:
    """
    Format a user document for API responses.

    The linked profile is inlined when given; otherwise only its id is
    returned.
    """
    record = {
        "id": str(user["_id"]),
        "email": user.get("email"),
        "username": user.get("username"),
        "isActive": user.get("isActive", True),
    }
    if profile is not None:
        record["profile"] = serialize_profile(profile)
    else:
        record["profile"] = _str_id(user.get("profile"))
    record["createdAt"] = user.get("createdAt")
    record["updatedAt"] = user.get("updatedAt")
    return record
