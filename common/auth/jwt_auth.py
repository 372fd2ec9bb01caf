"""
JWT token provider.

Issues and verifies signed JWTs that embed the caller's identity.
Tokens carry no expiry unless a lifetime is configured.

Example:
    auth = JWTAuth(secret="your-secret-key")

    token = await auth.create_token(user_id, email="user@example.com")

    claims = await auth.verify_token(token)
    print(claims["sub"])  # user_id
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

from jose import jwt, JWTError

from common.auth.base import TokenProvider


class JWTAuth(TokenProvider):
    """
    JWT token provider.

    Signs tokens with a shared secret. User storage and password
    checks live elsewhere; this class only deals with tokens.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: Optional[int] = None,
    ):
        """
        Initialize JWT token provider.

        Args:
            secret: Secret key for JWT signing (keep this secure!)
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Token lifetime. None issues tokens
                without an "exp" claim.
        """
        if not secret:
            raise ValueError("JWT secret must not be empty")

        self.secret = secret
        self.algorithm = algorithm
        self.access_token_expire: Optional[timedelta] = (
            timedelta(minutes=access_token_expire_minutes)
            if access_token_expire_minutes
            else None
        )

    async def create_token(
        self,
        user_id: str,
        **claims: Any,
    ) -> str:
        """Create a JWT token for the user."""
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            **claims,
            "sub": user_id,
            "iat": now,
        }
        if self.access_token_expire is not None:
            payload["exp"] = now + self.access_token_expire
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify and decode a JWT token."""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
            )
        except JWTError as e:
            raise ValueError(f"Invalid token: {e}")

        if not payload.get("sub"):
            raise ValueError("Invalid token: missing subject")
        return payload
