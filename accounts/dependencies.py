"""
Service wiring and FastAPI dependencies.

All services are built once at start-up by build_services() and stored
on app.state.services. Route dependencies read them back from the
request, so there are no module-level service singletons.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from accounts.config import Settings
from accounts.profile.services.profile_service import ProfileService
from accounts.user.services.directory_service import DirectoryService
from accounts.user.services.user_service import UserService
from common.auth import JWTAuth, PasswordHasher, TokenProvider, create_auth_dependency


@dataclass
class Services:
    """Everything the routes need, constructed once per process."""

    password_hasher: PasswordHasher
    token_provider: TokenProvider
    profile_service: ProfileService
    user_service: UserService
    directory_service: DirectoryService


def build_services(
    db: AsyncIOMotorDatabase,
    settings: Settings,
    use_transactions: bool,
) -> Services:
    """
    Build all services around one database handle.

    Args:
        db: MongoDB database connection
        settings: Application settings
        use_transactions: Whether user creation runs in a transaction
    """
    password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    token_provider = JWTAuth(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    profile_service = ProfileService(db=db)
    user_service = UserService(
        db=db,
        profile_service=profile_service,
        password_hasher=password_hasher,
        use_transactions=use_transactions,
    )
    directory_service = DirectoryService(db=db, profile_service=profile_service)

    return Services(
        password_hasher=password_hasher,
        token_provider=token_provider,
        profile_service=profile_service,
        user_service=user_service,
        directory_service=directory_service,
    )


def get_services(request: Request) -> Services:
    """Get the service container attached at start-up."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services not initialized. Call build_services() at start-up.")
    return services


def get_password_hasher(services: Annotated[Services, Depends(get_services)]) -> PasswordHasher:
    return services.password_hasher


def get_token_provider(services: Annotated[Services, Depends(get_services)]) -> TokenProvider:
    return services.token_provider


def get_profile_service(services: Annotated[Services, Depends(get_services)]) -> ProfileService:
    return services.profile_service


def get_user_service(services: Annotated[Services, Depends(get_services)]) -> UserService:
    return services.user_service


def get_directory_service(
    services: Annotated[Services, Depends(get_services)],
) -> DirectoryService:
    return services.directory_service


# Auth guard: resolves to the authenticated user's id
require_auth = create_auth_dependency(get_token_provider)
