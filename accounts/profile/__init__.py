"""
Profile System

Profile records and the standalone administrative profile routes.
"""

from accounts.profile.services import ProfileService

__all__ = ["ProfileService"]
