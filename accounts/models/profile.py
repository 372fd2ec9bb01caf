"""
Profile document model.
"""

from typing import Optional

import pymongo
from beanie import PydanticObjectId
from pydantic import Field
from pymongo import IndexModel

from common.database import BaseDocument

PROFILES_COLLECTION = "profiles"


class Profile(BaseDocument):
    """Personal data for a user, linked back to its owner through `user`."""

    firstName: str = Field(..., min_length=2, max_length=50)
    lastName: str = Field(..., min_length=2, max_length=50)
    avatar: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    phoneNumber: Optional[str] = None
    country: Optional[str] = None

    # Null until the owning user has been created
    user: Optional[PydanticObjectId] = None

    class Settings:
        name = PROFILES_COLLECTION
        indexes = [
            IndexModel([("user", pymongo.ASCENDING)]),
            IndexModel(
                [
                    ("firstName", pymongo.TEXT),
                    ("lastName", pymongo.TEXT),
                    ("bio", pymongo.TEXT),
                ],
                name="profile_text_search",
            ),
        ]
