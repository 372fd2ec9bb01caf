"""
Base document class with common fields for all models.

Provides createdAt and updatedAt timestamps. Extend this class for
application-specific models; Beanie creates the indexes each model
declares when the connection is initialized.

Example:
    from common.database import BaseDocument

    class User(BaseDocument):
        email: Indexed(str, unique=True)

        class Settings:
            name = "users"  # MongoDB collection name
"""

from datetime import datetime, timezone
from beanie import Document
from pydantic import Field


def utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


class BaseDocument(Document):
    """
    Base document with common fields.

    All documents extending this class will have:
    - createdAt: Timestamp when document was created
    - updatedAt: Timestamp when document was last modified

    Services write these fields themselves through Motor, so the names
    match the stored camelCase keys.
    """

    createdAt: datetime = Field(default_factory=utcnow)
    updatedAt: datetime = Field(default_factory=utcnow)
