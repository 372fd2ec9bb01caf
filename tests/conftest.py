"""Shared test fixtures for Users API tests."""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from accounts.profile.services.profile_service import ProfileService
from common.auth import JWTAuth, PasswordHasher


TEST_JWT_SECRET = "test-secret-key"


def _make_cursor(docs):
    """Motor-style cursor whose chained calls return itself."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


def _make_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # count_documents etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def users_collection():
    return _make_collection()


@pytest.fixture
def profiles_collection():
    return _make_collection()


@pytest.fixture
def mock_db(users_collection, profiles_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(side_effect=lambda key: {
        "users": users_collection,
        "profiles": profiles_collection,
    }[key])
    return db


@pytest.fixture
def password_hasher():
    # Lowest cost bcrypt accepts, to keep the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_provider():
    return JWTAuth(secret=TEST_JWT_SECRET)


@pytest.fixture
def profile_service(mock_db):
    return ProfileService(mock_db)


@pytest.fixture
def profile_fields():
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "bio": "First programmer",
        "country": "UK",
    }


@pytest.fixture
def sample_profile_doc(profile_fields):
    now = datetime.now(timezone.utc)
    return {
        "_id": ObjectId(),
        "firstName": profile_fields["firstName"],
        "lastName": profile_fields["lastName"],
        "avatar": None,
        "bio": profile_fields["bio"],
        "phoneNumber": None,
        "country": profile_fields["country"],
        "user": None,
        "createdAt": now,
        "updatedAt": now,
    }


@pytest.fixture
def sample_user_doc(sample_user_id, sample_profile_doc):
    """A stored user as returned with the password hash projected out."""
    now = datetime.now(timezone.utc)
    sample_profile_doc["user"] = ObjectId(sample_user_id)
    return {
        "_id": ObjectId(sample_user_id),
        "email": "ada@example.com",
        "username": "ada",
        "isActive": True,
        "profile": sample_profile_doc["_id"],
        "createdAt": now,
        "updatedAt": now,
    }


@pytest.fixture
def make_cursor():
    return _make_cursor
