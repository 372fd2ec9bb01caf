"""
User document model.

Authentication data only; personal data lives in the linked Profile.
"""

from beanie import Indexed, PydanticObjectId

from common.database import BaseDocument

USERS_COLLECTION = "users"


class User(BaseDocument):
    """
    User account.

    email and username are stored trimmed and lowercased. The unique
    indexes are the final guard against two concurrent sign-ups passing
    the uniqueness pre-check at the same time.
    """

    email: Indexed(str, unique=True)  # type: ignore
    username: Indexed(str, unique=True)  # type: ignore
    passwordHash: str
    isActive: bool = True
    profile: Indexed(PydanticObjectId)  # type: ignore

    class Settings:
        name = USERS_COLLECTION
