"""
FastAPI authentication dependencies.

Provides a factory that builds the auth guard for protected routes.
The token provider is itself resolved through FastAPI's dependency
system, so it can live on app.state instead of in a module global.

Example:
    from common.auth import create_auth_dependency

    def get_token_provider(request: Request) -> TokenProvider:
        return request.app.state.services.token_provider

    require_auth = create_auth_dependency(get_token_provider)

    @router.get("/users")
    async def list_users(user_id: str = Depends(require_auth)):
        ...
"""

from typing import Callable, Optional

from fastapi import Depends, Header

from common.auth.base import TokenProvider
from common.utils.exceptions import UnauthorizedException


def create_auth_dependency(
    get_token_provider: Callable[..., TokenProvider],
    header_name: str = "Authorization",
    scheme: str = "Bearer",
):
    """
    Factory to create FastAPI auth dependencies.

    Args:
        get_token_provider: FastAPI dependency that returns the TokenProvider
        header_name: Header to extract token from (default: Authorization)
        scheme: Auth scheme prefix (default: Bearer)

    Returns:
        A FastAPI dependency function that extracts and verifies the user ID
    """

    async def get_current_user_id(
        authorization: Optional[str] = Header(None, alias=header_name),
        token_provider: TokenProvider = Depends(get_token_provider),
    ) -> str:
        """
        Extract and verify user ID from the authorization header.

        Raises:
            UnauthorizedException: If token is missing, malformed, or invalid
        """
        if not authorization:
            raise UnauthorizedException(
                message="Missing authorization header",
                code="UNAUTHORIZED",
            )

        prefix = f"{scheme} "
        if not authorization.startswith(prefix):
            raise UnauthorizedException(
                message=f"Invalid authorization scheme. Expected: {scheme}",
                code="INVALID_AUTH_SCHEME",
            )

        token = authorization[len(prefix) :].strip()

        if not token:
            raise UnauthorizedException(
                message="Token is empty",
                code="EMPTY_TOKEN",
            )

        try:
            payload = await token_provider.verify_token(token)
        except ValueError:
            raise UnauthorizedException(
                message="Invalid or expired token",
                code="INVALID_TOKEN",
            )

        return payload["sub"]

    return get_current_user_id
