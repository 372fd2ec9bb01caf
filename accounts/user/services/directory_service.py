"""
Directory service: user search, sorting and pagination.

Users and profiles live in separate collections, so a search runs in two
steps: first collect the ids of profiles whose name or bio matches, then
match users on email, username, or a profile id from that set.
"""

import asyncio
import logging
import math
import re
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from accounts.models import USERS_COLLECTION
from accounts.profile.services.profile_service import ProfileService
from accounts.records import serialize_user
from common.utils.exceptions import BadRequestException

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("createdAt", "email", "username")
SORT_ORDERS = {"asc": 1, "desc": -1}

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def escape_search(text: str) -> str:
    """Escape free text so it matches literally inside a $regex filter."""
    return re.escape(text.strip())


class DirectoryService:
    """
    Lists users with optional free-text search.
    """

    def __init__(self, db: AsyncIOMotorDatabase, profile_service: ProfileService):
        self._db = db
        self._profile_service = profile_service
        self._users_collection = db[USERS_COLLECTION]

    async def build_filter(self, search: Optional[str]) -> dict:
        """Build the users filter for a search term (empty filter without one)."""
        if not search or not search.strip():
            return {}

        escaped = escape_search(search)
        profile_ids = await self._profile_service.find_ids_matching(escaped)
        pattern = {"$regex": escaped, "$options": "i"}
        return {
            "$or": [
                {"email": pattern},
                {"username": pattern},
                {"profile": {"$in": profile_ids}},
            ]
        }

    async def find_all(
        self,
        search: Optional[str] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> dict:
        """
        Return one page of users.

        Args:
            search: Text matched case-insensitively against email, username,
                and the linked profile's first name, last name and bio
            page: 1-based page number
            limit: Page size (1-100)
            sort_by: createdAt | email | username
            sort_order: asc | desc

        Returns:
            dict with users, total, page, limit and totalPages

        Raises:
            BadRequestException: Out-of-range paging or unknown sort option
        """
        if page < 1:
            raise BadRequestException(message="page must be at least 1", code="INVALID_PAGE")
        if not 1 <= limit <= MAX_LIMIT:
            raise BadRequestException(
                message=f"limit must be between 1 and {MAX_LIMIT}",
                code="INVALID_LIMIT",
            )
        if sort_by not in SORTABLE_FIELDS:
            raise BadRequestException(
                message=f"sortBy must be one of: {', '.join(SORTABLE_FIELDS)}",
                code="INVALID_SORT_FIELD",
            )
        if sort_order not in SORT_ORDERS:
            raise BadRequestException(
                message="sortOrder must be one of: asc, desc",
                code="INVALID_SORT_ORDER",
            )

        query = await self.build_filter(search)
        skip = (page - 1) * limit
        direction = SORT_ORDERS[sort_order]

        # _id as tie-breaker keeps pages stable when sort keys repeat
        cursor = (
            self._users_collection.find(query, {"passwordHash": 0})
            .sort([(sort_by, direction), ("_id", direction)])
            .skip(skip)
            .limit(limit)
        )
        users, total = await asyncio.gather(
            cursor.to_list(length=limit),
            self._users_collection.count_documents(query),
        )

        profiles = await self._profile_service.get_many(user.get("profile") for user in users)

        logger.debug(
            f"Directory page {page} (limit {limit}, search={bool(search)}): "
            f"{len(users)} of {total}"
        )

        return {
            "users": [serialize_user(user, profiles.get(user.get("profile"))) for user in users],
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        }
