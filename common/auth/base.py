"""
Abstract token provider interface.

Defines the contract that token issuers must implement so the auth
guard can verify tokens without knowing how they are signed.

Example:
    from common.auth import TokenProvider, JWTAuth

    def get_token_provider(settings) -> TokenProvider:
        return JWTAuth(secret=settings.JWT_SECRET)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class TokenProvider(ABC):
    """
    Abstract token provider.

    Tokens are stateless: issuing one persists nothing, and there is
    no revocation. A token stays valid until its signature (or its
    optional expiry) fails verification.
    """

    @abstractmethod
    async def create_token(
        self,
        user_id: str,
        **claims: Any,
    ) -> str:
        """
        Create an authentication token for a user.

        Args:
            user_id: The user's ID (becomes the "sub" claim)
            **claims: Additional claims to include in the token

        Returns:
            The authentication token string
        """
        pass

    @abstractmethod
    async def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify an authentication token.

        Args:
            token: The token to verify

        Returns:
            Dictionary containing decoded token claims (at minimum: sub)

        Raises:
            ValueError: If token is invalid or expired
        """
        pass
