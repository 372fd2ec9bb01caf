"""
Document models for the Users API.

These declare the collections and their indexes. Beanie creates the
indexes at start-up; services read and write the collections through
Motor using the same field names.
"""

from accounts.models.profile import Profile, PROFILES_COLLECTION
from accounts.models.user import User, USERS_COLLECTION

DOCUMENT_MODELS = [User, Profile]

__all__ = [
    "User",
    "Profile",
    "USERS_COLLECTION",
    "PROFILES_COLLECTION",
    "DOCUMENT_MODELS",
]
