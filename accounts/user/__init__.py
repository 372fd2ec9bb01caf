"""
User System

User lifecycle, the user/profile consistency protocol, and the user directory.
"""

from accounts.user.services import UserService, DirectoryService

__all__ = ["UserService", "DirectoryService"]
