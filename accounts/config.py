"""
Users API application settings.

Extends the base settings with account-specific configuration.
"""

from typing import Optional
from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """Users API settings."""

    # ==========================================================================
    # Persistence
    # ==========================================================================
    # Unset: detect from the server (replica set / mongos). Set to false to
    # force compensating rollbacks, true to force transactions.
    MONGODB_USE_TRANSACTIONS: Optional[bool] = None

    # ==========================================================================
    # Credentials
    # ==========================================================================
    BCRYPT_ROUNDS: int = 10

    # ==========================================================================
    # HTTP
    # ==========================================================================
    API_TITLE: str = "Users API"
    API_VERSION: str = "1.0.0"

    def collect_errors(self) -> list:
        errors = super().collect_errors()
        if not 4 <= self.BCRYPT_ROUNDS <= 31:
            errors.append("BCRYPT_ROUNDS must be between 4 and 31")
        return errors


# Global settings instance
settings = Settings()
