from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.common.exceptions import ForbiddenError, InvalidCredentialsError
from src.config.loader import Settings
from src.infra.database import DatabaseManager
from src.infra.redis_client import get_redis
from src.services.accounts.repository import UserRepository
from src.services.accounts.service import AccountService
from src.shared.models.enums import UserRole
from src.shared.models.user_dto import UserDTO

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_repository(request: Request) -> UserRepository:
    return UserRepository(DatabaseManager())


def get_account_service(request: Request) -> AccountService:
    repository = get_user_repository(request)
    return AccountService(
        repository,
        get_redis(),
        get_settings(request),
        reset_link_sender=getattr(request.app.state, "reset_link_sender", None),
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service: AccountService = Depends(get_account_service),
) -> UserDTO:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidCredentialsError("Authentication required")
    return await service.resolve_token(credentials.credentials)


def require_roles(*roles: UserRole):
    """Dependency factory restricting a route to the given roles."""
    async def checker(user: UserDTO = Depends(get_current_user)) -> UserDTO:
        if user.role not in roles:
            raise ForbiddenError()
        return user
    return checker


require_driver = require_roles(UserRole.DRIVER, UserRole.ADMIN)
require_admin = require_roles(UserRole.ADMIN)
