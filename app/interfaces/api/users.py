"""User API routes: register, OTP verification, login, logout, me, admin listing."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.security import HTTPAuthorizationCredentials

from app.config import get_settings
from app.core.exceptions import ForbiddenException, ValidationException
from app.application.services.auth_service import authenticate_user, issue_token, register_user
from app.application.services.otp_service import resend_otp, send_initial_otp, verify_otp
from app.domain.models.enums import Role
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    RegisterResponse,
    ResendOtpRequest,
    SessionUser,
    UserCreate,
    UserList,
    UserRead,
    VerifyOtpRequest,
)
from app.infrastructure.mailer import Mailer
from app.interfaces.api.deps import get_current_user, security
from app.interfaces.deps import get_mailer, get_user_repository

settings = get_settings()
router = APIRouter(prefix="/api/users", tags=["Users"])


def set_auth_cookies(response: Response, token: str, role: str) -> None:
    max_age = settings.JWT_EXPIRATION_MINUTES * 60
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )
    # Readable by the browser, used for page routing only
    response.set_cookie(
        settings.ROLE_COOKIE_NAME,
        role,
        max_age=max_age,
        path="/",
        httponly=False,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/", httponly=True, samesite="lax")
    response.delete_cookie(settings.ROLE_COOKIE_NAME, path="/", httponly=False, samesite="lax")


@router.post("/register", response_model=RegisterResponse)
def register(
    body: UserCreate,
    repo: UserRepository = Depends(get_user_repository),
    mailer: Mailer = Depends(get_mailer),
):
    user = register_user(repo, body)
    otp_sent = send_initial_otp(repo, mailer, user)
    return RegisterResponse(message="Registered successfully.", user_id=user.id, otp_sent=otp_sent)


@router.post("/resend-otp", response_model=MessageResponse)
def resend(
    body: ResendOtpRequest,
    repo: UserRepository = Depends(get_user_repository),
    mailer: Mailer = Depends(get_mailer),
):
    return MessageResponse(message=resend_otp(repo, mailer, body.email))


@router.post("/verify-otp", response_model=MessageResponse)
def verify(body: VerifyOtpRequest, repo: UserRepository = Depends(get_user_repository)):
    verify_otp(repo, body.user_id, body.code)
    return MessageResponse(message="Verified")


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, response: Response, repo: UserRepository = Depends(get_user_repository)):
    user = authenticate_user(repo, body.email, body.password, body.role)
    set_auth_cookies(response, issue_token(user), user.role)
    return LoginResponse(user=SessionUser.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    clear_auth_cookies(response)
    return MessageResponse(message="Successfully logged out")


@router.get("")
def get_users(
    request: Request,
    me: bool = False,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repo: UserRepository = Depends(get_user_repository),
):
    """`?me=true` echoes the caller's token identity; otherwise admins list every user."""
    user = get_current_user(request, credentials)
    if me:
        return MeResponse(user=user)

    if user.role != Role.ADMIN:
        raise ForbiddenException("Forbidden")
    return UserList(users=[UserRead.model_validate(u) for u in repo.list_newest_first()])


@router.post("", response_model=MessageResponse)
def user_action(response: Response, action: Optional[str] = Query(None)):
    if action == "logout":
        clear_auth_cookies(response)
        return MessageResponse(message="Logged out")
    raise ValidationException("Unknown action")
