"""
Profile service.

Owns the profiles collection. The standalone operations (create,
find_all, find_one, update, remove) back the /profiles admin routes.
The lower-level helpers take an optional client session so UserService
can run them inside its unit of work.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Iterable

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorClientSession
from pymongo import ReturnDocument

from accounts.models import PROFILES_COLLECTION
from accounts.records import (
    PROFILE_FIELDS,
    REQUIRED_PROFILE_FIELDS,
    parse_object_id,
    serialize_profile,
)
from common.utils.exceptions import NotFoundException

logger = logging.getLogger(__name__)

SEARCHABLE_FIELDS = ("firstName", "lastName", "bio")


class ProfileService:
    """
    Manages profile records.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize ProfileService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._profiles_collection = db[PROFILES_COLLECTION]

    # ─────────────────────────────────────────────────────────────────
    # Standalone operations
    # ─────────────────────────────────────────────────────────────────

    async def create(self, fields: dict) -> dict:
        """
        Create a profile that is not linked to any user.

        Args:
            fields: Profile fields (firstName and lastName required)

        Returns:
            Created profile record
        """
        profile_doc = await self.insert(fields)
        logger.info(f"Standalone profile created: {profile_doc['_id']}")
        return serialize_profile(profile_doc)

    async def find_all(self) -> List[dict]:
        """List every profile, newest first."""
        cursor = self._profiles_collection.find({}).sort("createdAt", -1)
        profiles = await cursor.to_list(length=None)
        return [serialize_profile(profile) for profile in profiles]

    async def find_one(self, profile_id: str) -> dict:
        """
        Load a profile by id.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such profile
        """
        oid = parse_object_id(profile_id)
        profile = await self.get_by_id(oid)
        if not profile:
            raise NotFoundException(
                message=f"Profile with ID {profile_id} not found",
                code="PROFILE_NOT_FOUND",
            )
        return serialize_profile(profile)

    async def update(self, profile_id: str, updates: dict) -> dict:
        """
        Partially update a profile.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such profile
        """
        oid = parse_object_id(profile_id)
        profile = await self.apply_update(oid, updates)
        if not profile:
            raise NotFoundException(
                message=f"Profile with ID {profile_id} not found",
                code="PROFILE_NOT_FOUND",
            )
        logger.info(f"Profile updated: {profile_id}")
        return serialize_profile(profile)

    async def remove(self, profile_id: str) -> dict:
        """
        Delete a profile.

        Deleting a profile that a user still references leaves that user
        without a resolvable profile; this is allowed for administrative
        use and logged.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such profile
        """
        oid = parse_object_id(profile_id)
        profile = await self.get_by_id(oid)
        if not profile:
            raise NotFoundException(
                message=f"Profile with ID {profile_id} not found",
                code="PROFILE_NOT_FOUND",
            )

        if profile.get("user"):
            logger.warning(
                f"Deleting profile {profile_id} still linked to user {profile['user']}"
            )

        await self._profiles_collection.delete_one({"_id": oid})
        logger.info(f"Profile deleted: {profile_id}")
        return {"message": "Profile deleted successfully", "id": profile_id}

    # ─────────────────────────────────────────────────────────────────
    # Helpers used by UserService and DirectoryService
    # ─────────────────────────────────────────────────────────────────

    async def insert(
        self,
        fields: dict,
        session: Optional[AsyncIOMotorClientSession] = None,
    ) -> dict:
        """Insert a new profile document and return it with its _id."""
        now = datetime.now(timezone.utc)
        profile_doc = {field: fields.get(field) for field in PROFILE_FIELDS}
        profile_doc["user"] = None
        profile_doc["createdAt"] = now
        profile_doc["updatedAt"] = now

        result = await self._profiles_collection.insert_one(profile_doc, session=session)
        profile_doc["_id"] = result.inserted_id
        return profile_doc

    async def link_user(
        self,
        profile_id: ObjectId,
        user_id: ObjectId,
        session: Optional[AsyncIOMotorClientSession] = None,
    ) -> None:
        """Set the back reference from a profile to its owning user."""
        result = await self._profiles_collection.update_one(
            {"_id": profile_id},
            {"$set": {"user": user_id, "updatedAt": datetime.now(timezone.utc)}},
            session=session,
        )
        if result.matched_count != 1:
            raise RuntimeError(f"Profile {profile_id} disappeared before it could be linked")

    async def delete_by_id(self, profile_id: ObjectId) -> int:
        """Delete a profile by _id. Safe to repeat."""
        result = await self._profiles_collection.delete_one({"_id": profile_id})
        return result.deleted_count

    async def get_by_id(self, profile_id: ObjectId) -> Optional[dict]:
        return await self._profiles_collection.find_one({"_id": profile_id})

    async def get_many(self, profile_ids: Iterable[ObjectId]) -> dict:
        """Fetch several profiles in one query, keyed by _id."""
        ids = list({pid for pid in profile_ids if pid is not None})
        if not ids:
            return {}
        cursor = self._profiles_collection.find({"_id": {"$in": ids}})
        profiles = await cursor.to_list(length=None)
        return {profile["_id"]: profile for profile in profiles}

    async def apply_update(self, profile_id: ObjectId, updates: dict) -> Optional[dict]:
        """
        $set the given profile fields and return the updated document.

        Unknown keys are ignored, and so is a null first or last name.
        Returns None if the profile does not exist.
        """
        changes = {
            key: value
            for key, value in updates.items()
            if key in PROFILE_FIELDS
            and not (key in REQUIRED_PROFILE_FIELDS and value is None)
        }
        changes["updatedAt"] = datetime.now(timezone.utc)
        return await self._profiles_collection.find_one_and_update(
            {"_id": profile_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    async def find_ids_matching(self, escaped_search: str) -> List[ObjectId]:
        """
        Ids of profiles whose name or bio contains the search text.

        Args:
            escaped_search: Search text already escaped for use in a regex
        """
        pattern = {"$regex": escaped_search, "$options": "i"}
        cursor = self._profiles_collection.find(
            {"$or": [{field: pattern} for field in SEARCHABLE_FIELDS]},
            {"_id": 1},
        )
        profiles = await cursor.to_list(length=None)
        return [profile["_id"] for profile in profiles]

