"""
User services.
"""

from accounts.user.services.user_service import UserService
from accounts.user.services.directory_service import DirectoryService

__all__ = ["UserService", "DirectoryService"]
