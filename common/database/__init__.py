"""
Database module - Generic async MongoDB connection using Beanie ODM.

Provides reusable MongoDB connectivity for any project.

Usage:
    from common.database import MongoDB, MongoUnitOfWork

    db = MongoDB()
    await db.connect(uri, database_name, models)

    async with MongoUnitOfWork(db.client, await db.supports_transactions()) as uow:
        ...
"""

from common.database.mongodb import MongoDB, mask_uri
from common.database.base_document import BaseDocument, utcnow
from common.database.unit_of_work import MongoUnitOfWork

__all__ = [
    "MongoDB",
    "BaseDocument",
    "MongoUnitOfWork",
    "mask_uri",
    "utcnow",
]
