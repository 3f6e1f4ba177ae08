"""FastAPI dependencies: token authentication and role gates."""

from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config import get_settings
from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.application.services.auth_service import payload_from_token
from app.domain.models.enums import Role
from app.domain.schemas.auth import AuthPayload

settings = get_settings()
security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthPayload:
    """Identity from the signed token: Bearer header first, then the auth cookie.

    The readable role cookie is never consulted here.
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise UnauthorizedException("Unauthorized")

    payload = payload_from_token(token)
    if payload is None:
        raise UnauthorizedException("Invalid or expired token")
    return payload


def require_roles(*roles: Role) -> Callable[..., AuthPayload]:
    def dependency(user: AuthPayload = Depends(get_current_user)) -> AuthPayload:
        if user.role not in roles:
            raise ForbiddenException("Forbidden")
        return user

    return dependency


require_staff = require_roles(Role.LIBRARIAN, Role.ADMIN)
