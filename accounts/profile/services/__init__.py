"""
Profile services.
"""

from accounts.profile.services.profile_service import ProfileService

__all__ = ["ProfileService"]
