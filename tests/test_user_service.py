"""Unit tests for UserService: creation protocol, reads, updates, deletion."""

import pytest
from unittest.mock import ANY, AsyncMock, MagicMock
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from accounts.user.services.user_service import UserService
from common.utils.exceptions import (
    BadRequestException,
    ConflictException,
    InternalServerException,
    NotFoundException,
)


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def user_service(mock_db, profile_service, password_hasher):
    return UserService(mock_db, profile_service, password_hasher)


@pytest.fixture
def new_ids(users_collection, profiles_collection):
    """Wire the collections so a full creation succeeds; return the new ids."""
    profile_id = ObjectId()
    user_id = ObjectId()
    users_collection.find_one.return_value = None
    profiles_collection.insert_one.return_value = MagicMock(inserted_id=profile_id)
    users_collection.insert_one.return_value = MagicMock(inserted_id=user_id)
    profiles_collection.update_one.return_value = MagicMock(matched_count=1)
    return user_id, profile_id


# ─────────────────────────────────────────────────────────────────
# create
# ─────────────────────────────────────────────────────────────────


class TestCreate:

    @pytest.mark.asyncio
    async def test_creates_profile_then_user_then_link(
        self, user_service, users_collection, profiles_collection, profile_fields, new_ids
    ):
        user_id, profile_id = new_ids

        result = await user_service.create(
            email="  Ada@Example.com ",
            username="Ada",
            password="password123",
            profile=profile_fields,
        )

        assert result["id"] == str(user_id)
        assert result["email"] == "ada@example.com"
        assert result["username"] == "ada"
        assert result["isActive"] is True
        assert result["profile"]["id"] == str(profile_id)
        assert result["profile"]["user"] == str(user_id)
        assert result["profile"]["firstName"] == "Ada"

        stored_user = users_collection.insert_one.call_args[0][0]
        assert stored_user["profile"] == profile_id
        profiles_collection.update_one.assert_awaited_once_with(
            {"_id": profile_id},
            {"$set": {"user": user_id, "updatedAt": ANY}},
            session=None,
        )
        users_collection.delete_one.assert_not_awaited()
        profiles_collection.delete_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_password_is_hashed_and_never_returned(
        self, user_service, users_collection, password_hasher, profile_fields, new_ids
    ):
        result = await user_service.create(
            email="ada@example.com",
            username="ada",
            password="password123",
            profile=profile_fields,
        )

        assert "passwordHash" not in result
        stored_hash = users_collection.insert_one.call_args[0][0]["passwordHash"]
        assert stored_hash != "password123"
        assert password_hasher.verify_sync("password123", stored_hash)

    @pytest.mark.asyncio
    async def test_taken_email_rejected_case_insensitively(
        self, user_service, users_collection, profiles_collection, profile_fields
    ):
        users_collection.find_one.side_effect = (
            lambda query, projection=None: {"_id": ObjectId()} if "email" in query else None
        )

        with pytest.raises(ConflictException) as exc_info:
            await user_service.create(
                email="ADA@example.com",
                username="someone",
                password="password123",
                profile=profile_fields,
            )

        assert exc_info.value.code == "EMAIL_ALREADY_REGISTERED"
        assert users_collection.find_one.call_args_list[0][0][0] == {"email": "ada@example.com"}
        profiles_collection.insert_one.assert_not_awaited()
        users_collection.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_taken_username_rejected(
        self, user_service, users_collection, profiles_collection, profile_fields
    ):
        users_collection.find_one.side_effect = (
            lambda query, projection=None: {"_id": ObjectId()} if "username" in query else None
        )

        with pytest.raises(ConflictException) as exc_info:
            await user_service.create(
                email="ada@example.com",
                username="Ada",
                password="password123",
                profile=profile_fields,
            )

        assert exc_info.value.code == "USERNAME_ALREADY_TAKEN"
        profiles_collection.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_user_write_failure_deletes_profile(
        self, user_service, users_collection, profiles_collection, profile_fields, new_ids
    ):
        _, profile_id = new_ids
        users_collection.insert_one.side_effect = ConnectionError("store unreachable")

        with pytest.raises(InternalServerException) as exc_info:
            await user_service.create(
                email="ada@example.com",
                username="ada",
                password="password123",
                profile=profile_fields,
            )

        assert exc_info.value.code == "USER_CREATION_FAILED"
        profiles_collection.delete_one.assert_awaited_once_with({"_id": profile_id})
        users_collection.delete_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_link_failure_deletes_user_and_profile(
        self, user_service, users_collection, profiles_collection, profile_fields, new_ids
    ):
        user_id, profile_id = new_ids
        profiles_collection.update_one.return_value = MagicMock(matched_count=0)

        with pytest.raises(InternalServerException) as exc_info:
            await user_service.create(
                email="ada@example.com",
                username="ada",
                password="password123",
                profile=profile_fields,
            )

        assert exc_info.value.code == "USER_CREATION_FAILED"
        users_collection.delete_one.assert_awaited_once_with({"_id": user_id})
        profiles_collection.delete_one.assert_awaited_once_with({"_id": profile_id})

    @pytest.mark.asyncio
    async def test_unique_index_race_maps_to_conflict(
        self, user_service, users_collection, profiles_collection, profile_fields, new_ids
    ):
        _, profile_id = new_ids
        users_collection.insert_one.side_effect = DuplicateKeyError(
            "E11000 duplicate key error",
            code=11000,
            details={"keyPattern": {"username": 1}, "keyValue": {"username": "ada"}},
        )

        with pytest.raises(ConflictException) as exc_info:
            await user_service.create(
                email="ada@example.com",
                username="ada",
                password="password123",
                profile=profile_fields,
            )

        assert exc_info.value.code == "USERNAME_ALREADY_TAKEN"
        profiles_collection.delete_one.assert_awaited_once_with({"_id": profile_id})

    @pytest.mark.asyncio
    async def test_failed_rollback_reported(
        self, user_service, users_collection, profiles_collection, profile_fields, new_ids
    ):
        users_collection.insert_one.side_effect = ConnectionError("store unreachable")
        profiles_collection.delete_one.side_effect = ConnectionError("still unreachable")

        with pytest.raises(InternalServerException) as exc_info:
            await user_service.create(
                email="ada@example.com",
                username="ada",
                password="password123",
                profile=profile_fields,
            )

        assert exc_info.value.code == "USER_ROLLBACK_FAILED"

    @pytest.mark.asyncio
    async def test_transaction_mode_passes_session_and_aborts(
        self,
        mock_db,
        profile_service,
        password_hasher,
        users_collection,
        profiles_collection,
        profile_fields,
        new_ids,
    ):
        session = MagicMock()
        session.in_transaction = True
        session.abort_transaction = AsyncMock()
        session.commit_transaction = AsyncMock()
        session.end_session = AsyncMock()
        mock_db.client.start_session = AsyncMock(return_value=session)
        service = UserService(mock_db, profile_service, password_hasher, use_transactions=True)
        users_collection.insert_one.side_effect = ConnectionError("store unreachable")

        with pytest.raises(InternalServerException):
            await service.create(
                email="ada@example.com",
                username="ada",
                password="password123",
                profile=profile_fields,
            )

        assert profiles_collection.insert_one.call_args.kwargs["session"] is session
        assert users_collection.insert_one.call_args.kwargs["session"] is session
        session.abort_transaction.assert_awaited_once()
        profiles_collection.delete_one.assert_not_awaited()


# ─────────────────────────────────────────────────────────────────
# Reads
# ─────────────────────────────────────────────────────────────────


class TestFindOne:

    @pytest.mark.asyncio
    async def test_invalid_id(self, user_service):
        with pytest.raises(BadRequestException) as exc_info:
            await user_service.find_one("not-an-id")

        assert exc_info.value.code == "INVALID_ID"

    @pytest.mark.asyncio
    async def test_missing_user(self, user_service, users_collection, sample_user_id):
        users_collection.find_one.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await user_service.find_one(sample_user_id)

        assert exc_info.value.code == "USER_NOT_FOUND"
        assert sample_user_id in exc_info.value.message

    @pytest.mark.asyncio
    async def test_profile_populated_and_hash_projected_out(
        self,
        user_service,
        users_collection,
        profiles_collection,
        sample_user_id,
        sample_user_doc,
        sample_profile_doc,
    ):
        users_collection.find_one.return_value = sample_user_doc
        profiles_collection.find_one.return_value = sample_profile_doc

        result = await user_service.find_one(sample_user_id)

        users_collection.find_one.assert_awaited_once_with(
            {"_id": ObjectId(sample_user_id)}, {"passwordHash": 0}
        )
        assert result["id"] == sample_user_id
        assert result["profile"]["firstName"] == "Ada"
        assert result["profile"]["user"] == sample_user_id

    @pytest.mark.asyncio
    async def test_find_by_email_normalizes(self, user_service, users_collection):
        users_collection.find_one.return_value = None

        assert await user_service.find_by_email(" ADA@example.com") is None
        users_collection.find_one.assert_awaited_once_with({"email": "ada@example.com"})


# ─────────────────────────────────────────────────────────────────
# update
# ─────────────────────────────────────────────────────────────────


class TestUpdate:

    @pytest.mark.asyncio
    async def test_profile_only_update_leaves_user_untouched(
        self,
        user_service,
        users_collection,
        profiles_collection,
        sample_user_id,
        sample_user_doc,
        sample_profile_doc,
    ):
        users_collection.find_one.return_value = sample_user_doc
        profiles_collection.find_one.return_value = sample_profile_doc
        profiles_collection.find_one_and_update.return_value = sample_profile_doc

        await user_service.update(sample_user_id, {"profile": {"bio": "Analyst"}})

        users_collection.update_one.assert_not_awaited()
        query, update = profiles_collection.find_one_and_update.call_args[0]
        assert query == {"_id": sample_profile_doc["_id"]}
        assert update["$set"]["bio"] == "Analyst"
        assert "firstName" not in update["$set"]

    @pytest.mark.asyncio
    async def test_user_fields_only_leave_profile_untouched(
        self, user_service, users_collection, profiles_collection, sample_user_id, sample_user_doc
    ):
        users_collection.find_one.return_value = sample_user_doc

        await user_service.update(sample_user_id, {"isActive": False})

        query, update = users_collection.update_one.call_args[0]
        assert query == {"_id": ObjectId(sample_user_id)}
        assert update["$set"]["isActive"] is False
        assert "updatedAt" in update["$set"]
        profiles_collection.find_one_and_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_email_owned_by_other_user_rejected(
        self, user_service, users_collection, sample_user_id, sample_user_doc
    ):
        def find_one(query, projection=None):
            if query.get("email") == "taken@example.com":
                return {"_id": ObjectId()}
            return sample_user_doc

        users_collection.find_one.side_effect = find_one

        with pytest.raises(ConflictException) as exc_info:
            await user_service.update(sample_user_id, {"email": "Taken@Example.com"})

        assert exc_info.value.code == "EMAIL_ALREADY_REGISTERED"
        users_collection.update_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unchanged_email_skips_uniqueness_check(
        self, user_service, users_collection, sample_user_id, sample_user_doc
    ):
        users_collection.find_one.return_value = sample_user_doc

        await user_service.update(sample_user_id, {"email": "ADA@example.com"})

        for call in users_collection.find_one.call_args_list:
            assert "email" not in call[0][0]
        users_collection.update_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_profile_failure_reported_after_user_write(
        self, user_service, users_collection, profiles_collection, sample_user_id, sample_user_doc
    ):
        users_collection.find_one.return_value = sample_user_doc
        profiles_collection.find_one_and_update.side_effect = ConnectionError("store unreachable")

        with pytest.raises(InternalServerException) as exc_info:
            await user_service.update(
                sample_user_id, {"username": "countess", "profile": {"bio": "Analyst"}}
            )

        assert exc_info.value.code == "PROFILE_UPDATE_FAILED"
        users_collection.update_one.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_user(self, user_service, users_collection, sample_user_id):
        users_collection.find_one.return_value = None

        with pytest.raises(NotFoundException):
            await user_service.update(sample_user_id, {"isActive": False})


# ─────────────────────────────────────────────────────────────────
# User's profile
# ─────────────────────────────────────────────────────────────────


class TestUserProfile:

    @pytest.mark.asyncio
    async def test_get_profile(
        self,
        user_service,
        users_collection,
        profiles_collection,
        sample_user_id,
        sample_profile_doc,
    ):
        users_collection.find_one.return_value = {"_id": ObjectId(sample_user_id), "profile": sample_profile_doc["_id"]}
        profiles_collection.find_one.return_value = sample_profile_doc

        result = await user_service.get_profile(sample_user_id)

        assert result["id"] == str(sample_profile_doc["_id"])
        assert result["lastName"] == "Lovelace"

    @pytest.mark.asyncio
    async def test_get_profile_dangling_reference(
        self, user_service, users_collection, profiles_collection, sample_user_id
    ):
        users_collection.find_one.return_value = {"_id": ObjectId(sample_user_id), "profile": ObjectId()}
        profiles_collection.find_one.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await user_service.get_profile(sample_user_id)

        assert exc_info.value.code == "PROFILE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_update_profile_of_missing_user(self, user_service, users_collection, sample_user_id):
        users_collection.find_one.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await user_service.update_profile(sample_user_id, {"bio": "Analyst"})

        assert exc_info.value.code == "USER_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_update_profile(
        self,
        user_service,
        users_collection,
        profiles_collection,
        sample_user_id,
        sample_profile_doc,
    ):
        users_collection.find_one.return_value = {"_id": ObjectId(sample_user_id), "profile": sample_profile_doc["_id"]}
        profiles_collection.find_one_and_update.return_value = {**sample_profile_doc, "bio": "Analyst"}

        result = await user_service.update_profile(sample_user_id, {"bio": "Analyst"})

        assert result["bio"] == "Analyst"


# ─────────────────────────────────────────────────────────────────
# remove
# ─────────────────────────────────────────────────────────────────


class TestRemove:

    @pytest.mark.asyncio
    async def test_deletes_user_and_profile(
        self, user_service, users_collection, profiles_collection, sample_user_id
    ):
        profile_id = ObjectId()
        users_collection.find_one.return_value = {"_id": ObjectId(sample_user_id), "profile": profile_id}

        result = await user_service.remove(sample_user_id)

        assert result == {"message": "User deleted successfully", "id": sample_user_id}
        users_collection.delete_one.assert_awaited_once_with({"_id": ObjectId(sample_user_id)})
        profiles_collection.delete_one.assert_awaited_once_with({"_id": profile_id})

    @pytest.mark.asyncio
    async def test_profile_delete_failure_reported_after_both_attempts(
        self, user_service, users_collection, profiles_collection, sample_user_id
    ):
        users_collection.find_one.return_value = {"_id": ObjectId(sample_user_id), "profile": ObjectId()}
        profiles_collection.delete_one.side_effect = ConnectionError("store unreachable")

        with pytest.raises(InternalServerException) as exc_info:
            await user_service.remove(sample_user_id)

        assert exc_info.value.code == "USER_DELETION_FAILED"
        users_collection.delete_one.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_user(self, user_service, users_collection, sample_user_id):
        users_collection.find_one.return_value = None

        with pytest.raises(NotFoundException):
            await user_service.remove(sample_user_id)

        users_collection.delete_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_id(self, user_service, users_collection):
        with pytest.raises(BadRequestException):
            await user_service.remove("123")

        users_collection.find_one.assert_not_awaited()
