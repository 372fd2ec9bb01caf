"""
Generic MongoDB connection manager using Beanie ODM.

This module provides async MongoDB connectivity that works with any database.
Models are provided at connection time, allowing complete separation of
database infrastructure from application-specific schemas. Beanie
creates the indexes each model declares during connect().

Example:
    from common.database import MongoDB
    from accounts.models import User, Profile

    db = MongoDB()
    await db.connect(
        uri="mongodb://localhost:27017",
        database_name="users_api",
        document_models=[User, Profile]
    )

    users = db.db["users"]
    if await db.supports_transactions():
        ...

There are no module-level instances: the application creates one
MongoDB per process and passes it (or its database handle) to the
services that need it.
"""

import logging
from typing import List, Type, Optional

from beanie import init_beanie, Document
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)


def mask_uri(uri: str) -> str:
    """Strip credentials from a connection string for logging."""
    return uri.split("@")[-1] if "@" in uri else uri


class MongoDB:
    """Generic MongoDB connection manager - works with any database."""

    def __init__(self):
        self._client: Optional[AsyncIOMotorClient] = None
        self._database_name: Optional[str] = None
        self._initialized: bool = False
        self._supports_transactions: Optional[bool] = None

    async def connect(
        self,
        uri: str,
        database_name: str,
        document_models: List[Type[Document]],
    ) -> None:
        """
        Connect to MongoDB and initialize Beanie with provided models.

        Args:
            uri: MongoDB connection string
            database_name: Name of the database to use
            document_models: List of Beanie Document classes to initialize
        """
        logger.info(f"Connecting to MongoDB: {mask_uri(uri)}")
        logger.debug(f"Database name: {database_name}")
        logger.debug(f"Document models: {[m.__name__ for m in document_models]}")

        try:
            self._client = AsyncIOMotorClient(uri, tz_aware=True)
            self._database_name = database_name

            logger.debug("Initializing Beanie ODM")
            await init_beanie(
                database=self._client[database_name],
                document_models=document_models,
            )
            self._initialized = True
            logger.info(f"Successfully connected to MongoDB database: {database_name}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def disconnect(self) -> None:
        """Close the MongoDB connection."""
        if self._client:
            logger.info(f"Disconnecting from MongoDB database: {self._database_name}")
            self._client.close()
            self._client = None
            self._database_name = None
            self._initialized = False
            self._supports_transactions = None
            logger.debug("MongoDB connection closed")

    @property
    def is_connected(self) -> bool:
        """Check if database is connected and initialized."""
        return self._initialized

    @property
    def client(self) -> Optional[AsyncIOMotorClient]:
        """Get the underlying Motor client."""
        return self._client

    @property
    def database_name(self) -> Optional[str]:
        """Get the current database name."""
        return self._database_name

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """Get the underlying Motor database instance."""
        if not self._client or not self._database_name:
            raise RuntimeError("Database not connected")
        return self._client[self._database_name]

    async def ping(self) -> bool:
        """Round-trip to the server. Returns False instead of raising."""
        if not self._client:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except Exception as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    async def supports_transactions(self) -> bool:
        """
        Check whether the deployment accepts multi-document transactions.

        Transactions need a replica set member or a mongos router; a
        standalone server rejects them. The answer is cached per connection.
        """
        if self._supports_transactions is not None:
            return self._supports_transactions
        if not self._client:
            raise RuntimeError("Database not connected")

        hello = await self._client.admin.command("hello")
        self._supports_transactions = bool(
            hello.get("setName") or hello.get("msg") == "isdbgrid"
        )
        logger.info(
            f"MongoDB multi-document transactions "
            f"{'available' if self._supports_transactions else 'unavailable'}"
        )
        return self._supports_transactions
