"""
User service for user lifecycle management.

Owns the users collection and keeps each user consistent with its
profile: a user and its profile are created together as one unit,
deleted together, and reference each other.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from accounts.models import USERS_COLLECTION
from accounts.profile.services.profile_service import ProfileService
from accounts.records import (
    normalize_identity,
    parse_object_id,
    serialize_profile,
    serialize_user,
)
from common.auth.password_hasher import PasswordHasher
from common.database.unit_of_work import MongoUnitOfWork
from common.utils.exceptions import (
    APIException,
    ConflictException,
    InternalServerException,
    NotFoundException,
)

logger = logging.getLogger(__name__)

WITHOUT_PASSWORD = {"passwordHash": 0}


def _email_taken() -> ConflictException:
    return ConflictException(
        message="Email is already registered",
        code="EMAIL_ALREADY_REGISTERED",
        details={"field": "email"},
    )


def _username_taken() -> ConflictException:
    return ConflictException(
        message="Username is already taken",
        code="USERNAME_ALREADY_TAKEN",
        details={"field": "username"},
    )


def _duplicate_field(error: DuplicateKeyError) -> Optional[str]:
    """Name of the field behind a unique index violation, if reported."""
    details = error.details or {}
    key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
    return next(iter(key_pattern), None)


class UserService:
    """
    Manages users and the user/profile consistency protocol.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        profile_service: ProfileService,
        password_hasher: PasswordHasher,
        use_transactions: bool = False,
    ):
        """
        Initialize UserService.

        Args:
            db: MongoDB database connection
            profile_service: Owner of the profiles collection
            password_hasher: For hashing new passwords
            use_transactions: Run user creation in a multi-document
                transaction instead of relying on compensating deletes
        """
        self._db = db
        self._profile_service = profile_service
        self._password_hasher = password_hasher
        self._use_transactions = use_transactions
        self._users_collection = db[USERS_COLLECTION]

    # ─────────────────────────────────────────────────────────────────
    # Create
    # ─────────────────────────────────────────────────────────────────

    async def create(
        self,
        email: str,
        username: str,
        password: str,
        profile: dict,
    ) -> dict:
        """
        Create a user together with its profile.

        Writes, in order: the profile, the user referencing it, then the
        profile's back reference to the user. The three writes succeed or
        fail together: inside a transaction when the deployment supports
        one, otherwise by deleting whatever was written before the failure.

        Args:
            email: User's email address (normalized here)
            username: User's username (normalized here)
            password: Plaintext password (hashed here)
            profile: Profile fields (firstName, lastName, ...)

        Returns:
            Created user record with the profile inlined

        Raises:
            ConflictException: Email or username already in use
            InternalServerException: A write failed (after rollback)
        """
        normalized_email = normalize_identity(email)
        normalized_username = normalize_identity(username)

        if await self._users_collection.find_one({"email": normalized_email}, {"_id": 1}):
            logger.info("Rejected user creation: email already registered")
            raise _email_taken()

        if await self._users_collection.find_one({"username": normalized_username}, {"_id": 1}):
            logger.info("Rejected user creation: username already taken")
            raise _username_taken()

        password_hash = await self._password_hasher.hash(password)

        uow = MongoUnitOfWork(
            client=self._db.client if self._use_transactions else None,
            use_transactions=self._use_transactions,
            name="user creation",
        )

        try:
            async with uow:
                profile_doc = await self._profile_service.insert(profile, session=uow.session)
                profile_id = profile_doc["_id"]
                uow.add_compensation(
                    f"delete profile {profile_id}",
                    lambda: self._profile_service.delete_by_id(profile_id),
                )

                now = datetime.now(timezone.utc)
                user_doc = {
                    "email": normalized_email,
                    "username": normalized_username,
                    "passwordHash": password_hash,
                    "isActive": True,
                    "profile": profile_id,
                    "createdAt": now,
                    "updatedAt": now,
                }
                result = await self._users_collection.insert_one(user_doc, session=uow.session)
                user_id = result.inserted_id
                user_doc["_id"] = user_id
                uow.add_compensation(
                    f"delete user {user_id}",
                    lambda: self._users_collection.delete_one({"_id": user_id}),
                )

                await self._profile_service.link_user(profile_id, user_id, session=uow.session)
                profile_doc["user"] = user_id
        except APIException:
            raise
        except DuplicateKeyError as e:
            self._raise_if_rollback_failed(uow, e)
            field = _duplicate_field(e)
            logger.info(f"User creation lost a uniqueness race on '{field}'")
            if field == "username":
                raise _username_taken()
            raise _email_taken()
        except Exception as e:
            self._raise_if_rollback_failed(uow, e)
            logger.error(f"User creation failed and was rolled back: {type(e).__name__}: {e}")
            raise InternalServerException(
                message="Failed to create user and profile",
                code="USER_CREATION_FAILED",
            )

        logger.info(f"User created: {user_id} (profile {profile_id})")
        return serialize_user(user_doc, profile_doc)

    def _raise_if_rollback_failed(self, uow: MongoUnitOfWork, error: Exception) -> None:
        if not uow.failed_compensations:
            return
        logger.error(
            f"User creation failed ({type(error).__name__}: {error}) and rollback "
            f"was incomplete; leftover writes: {uow.failed_compensations}"
        )
        raise InternalServerException(
            message="Failed to create user and profile",
            code="USER_ROLLBACK_FAILED",
        )

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    async def find_one(self, user_id: str) -> dict:
        """
        Load a user with its profile populated.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such user
        """
        oid = parse_object_id(user_id)
        user = await self._users_collection.find_one({"_id": oid}, WITHOUT_PASSWORD)
        if not user:
            raise NotFoundException(
                message=f"User with ID {user_id} not found",
                code="USER_NOT_FOUND",
            )

        profile = None
        if user.get("profile") is not None:
            profile = await self._profile_service.get_by_id(user["profile"])
        return serialize_user(user, profile)

    async def find_by_email(self, email: str) -> Optional[dict]:
        """
        Load the raw user document by email, password hash included.

        For credential checks only; never return this document to callers.
        """
        return await self._users_collection.find_one({"email": normalize_identity(email)})

    # ─────────────────────────────────────────────────────────────────
    # Update
    # ─────────────────────────────────────────────────────────────────

    async def update(self, user_id: str, updates: dict) -> dict:
        """
        Partially update a user and, optionally, its profile.

        The user fields and the profile fields are two separate writes.
        If the profile write fails the user write is kept and the failure
        is reported.

        Args:
            user_id: MongoDB user ID
            updates: email, username, isActive and/or a nested "profile" dict

        Returns:
            Refreshed user record with the profile inlined

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such user
            ConflictException: New email or username belongs to another user
            InternalServerException: Profile write failed
        """
        oid = parse_object_id(user_id)
        user = await self._users_collection.find_one({"_id": oid}, WITHOUT_PASSWORD)
        if not user:
            raise NotFoundException(
                message=f"User with ID {user_id} not found",
                code="USER_NOT_FOUND",
            )

        user_changes = {}

        if updates.get("email") is not None:
            email = normalize_identity(updates["email"])
            if email != user.get("email"):
                if await self._users_collection.find_one(
                    {"email": email, "_id": {"$ne": oid}}, {"_id": 1}
                ):
                    raise _email_taken()
                user_changes["email"] = email

        if updates.get("username") is not None:
            username = normalize_identity(updates["username"])
            if username != user.get("username"):
                if await self._users_collection.find_one(
                    {"username": username, "_id": {"$ne": oid}}, {"_id": 1}
                ):
                    raise _username_taken()
                user_changes["username"] = username

        if updates.get("isActive") is not None:
            user_changes["isActive"] = updates["isActive"]

        if user_changes:
            user_changes["updatedAt"] = datetime.now(timezone.utc)
            await self._users_collection.update_one({"_id": oid}, {"$set": user_changes})
            logger.info(f"User updated: {user_id} ({sorted(user_changes)})")

        profile_changes = updates.get("profile") or {}
        if profile_changes and user.get("profile") is not None:
            try:
                await self._profile_service.apply_update(user["profile"], profile_changes)
            except Exception as e:
                logger.error(
                    f"Profile update failed for user {user_id} after user fields "
                    f"were saved: {type(e).__name__}: {e}"
                )
                raise InternalServerException(
                    message="User was updated but the profile update failed",
                    code="PROFILE_UPDATE_FAILED",
                )

        return await self.find_one(user_id)

    async def get_profile(self, user_id: str) -> dict:
        """
        Get the profile linked to a user.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such user, or its profile is missing
        """
        oid = parse_object_id(user_id)
        user = await self._users_collection.find_one({"_id": oid}, {"profile": 1})
        if not user:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        profile = None
        if user.get("profile") is not None:
            profile = await self._profile_service.get_by_id(user["profile"])
        if not profile:
            raise NotFoundException(message="Profile not found", code="PROFILE_NOT_FOUND")
        return serialize_profile(profile)

    async def update_profile(self, user_id: str, updates: dict) -> dict:
        """
        Partially update the profile linked to a user.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such user, or its profile is missing
        """
        oid = parse_object_id(user_id)
        user = await self._users_collection.find_one({"_id": oid}, {"profile": 1})
        if not user:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        profile = None
        if user.get("profile") is not None:
            profile = await self._profile_service.apply_update(user["profile"], updates)
        if not profile:
            raise NotFoundException(message="Profile not found", code="PROFILE_NOT_FOUND")

        logger.info(f"Profile updated for user {user_id}")
        return serialize_profile(profile)

    # ─────────────────────────────────────────────────────────────────
    # Delete
    # ─────────────────────────────────────────────────────────────────

    async def remove(self, user_id: str) -> dict:
        """
        Delete a user and its profile.

        Both deletes are started concurrently and both always run to
        completion; this is not transactional. If one fails the other may
        still have succeeded (e.g. a dangling profile).

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such user
            InternalServerException: Either delete failed
        """
        oid = parse_object_id(user_id)
        user = await self._users_collection.find_one({"_id": oid}, {"profile": 1})
        if not user:
            raise NotFoundException(
                message=f"User with ID {user_id} not found",
                code="USER_NOT_FOUND",
            )

        profile_id: Optional[ObjectId] = user.get("profile")
        operations = [self._users_collection.delete_one({"_id": oid})]
        if profile_id is not None:
            operations.append(self._profile_service.delete_by_id(profile_id))

        results = await asyncio.gather(*operations, return_exceptions=True)
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            for failure in failures:
                logger.error(
                    f"Deletion of user {user_id} / profile {profile_id} partially "
                    f"failed: {type(failure).__name__}: {failure}"
                )
            raise InternalServerException(
                message="Failed to delete user and profile",
                code="USER_DELETION_FAILED",
            )

        logger.info(f"User deleted: {user_id} (profile {profile_id})")
        return {"message": "User deleted successfully", "id": user_id}
