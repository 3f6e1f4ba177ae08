"""
Middleware configuration for the application.
Includes Correlation ID setup, request logging and role-based page gating.
"""

import time
import structlog
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from asgi_correlation_id import CorrelationIdMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings
from app.domain.models.enums import Role

logger = structlog.get_logger(__name__)
settings = get_settings()

LOGIN_PATH = "/login"

# Page area prefix -> role allowed to see it
PROTECTED_AREAS = {
    "/admin": Role.ADMIN,
    "/librarian": Role.LIBRARIAN,
    "/patron": Role.PATRON,
}

DASHBOARDS = {
    Role.ADMIN: "/admin/dashboard",
    Role.LIBRARIAN: "/librarian/dashboard",
    Role.PATRON: "/patron/dashboard",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log requests and responses with timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                method=request.method,
                path=request.url.path,
                process_time_ms=round((time.time() - start_time) * 1000, 2),
            )
            raise

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round((time.time() - start_time) * 1000, 2),
        )
        return response


def _protected_area(path: str) -> Role | None:
    for prefix, role in PROTECTED_AREAS.items():
        if path == prefix or path.startswith(prefix + "/"):
            return role
    return None


def _cookie_role(request: Request) -> Role | None:
    raw = request.cookies.get(settings.ROLE_COOKIE_NAME)
    try:
        return Role(raw) if raw else None
    except ValueError:
        return None


class RoleGateMiddleware(BaseHTTPMiddleware):
    """Coarse page routing driven by the readable role cookie.

    Only decides which pages a browser is sent to. API routes never look at
    the role cookie; they verify the signed auth token instead.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        role = _cookie_role(request)

        required = _protected_area(path)
        if required is not None and role != required:
            logger.info("Page access redirected to login", path=path, role=role)
            return RedirectResponse(LOGIN_PATH)

        if path == LOGIN_PATH and role is not None:
            return RedirectResponse(DASHBOARDS[role])

        return await call_next(request)


def setup_middleware(app):
    """Setup all middleware for the application."""

    # Starlette runs the last added middleware first
    app.add_middleware(RoleGateMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )
