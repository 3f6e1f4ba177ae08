"""Auth service: JWT token management, password hashing, registration and login."""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError

from app.config import get_settings
from app.core.exceptions import AppError, ConflictException, ForbiddenException, UnauthorizedException
from app.domain.models.enums import Role
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.auth import AuthPayload, UserCreate

settings = get_settings()
logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

INVALID_CREDENTIALS = "Invalid credentials"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def issue_token(user: User) -> str:
    # JWT "sub" must be a string
    return create_access_token({"sub": str(user.id), "role": user.role, "email": user.email})


def decode_access_token(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        return payload
    except JWTError:
        return None


def payload_from_token(token: str) -> Optional[AuthPayload]:
    """Verified identity for a token, or None for anything malformed, expired or tampered."""
    payload = decode_access_token(token)
    if payload is None:
        return None
    try:
        return AuthPayload(
            id=int(payload["sub"]),
            email=payload["email"],
            role=Role(payload["role"]),
        )
    except (KeyError, TypeError, ValueError):
        return None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_library_card_number(repo: UserRepository) -> str:
    """Prefix plus six random digits, retried until unused."""
    for _ in range(settings.LIBRARY_CARD_MAX_ATTEMPTS):
        candidate = f"{settings.LIBRARY_CARD_PREFIX}{100000 + secrets.randbelow(900000)}"
        if not repo.card_number_exists(candidate):
            return candidate
    logger.error("Library card number space exhausted", attempts=settings.LIBRARY_CARD_MAX_ATTEMPTS)
    raise AppError("Could not allocate a library card number")


def get_user_by_email(repo: UserRepository, email: str) -> Optional[User]:
    return repo.get_by_email(normalize_email(email))


def create_user(
    repo: UserRepository,
    name: str,
    email: str,
    password: str,
    role: Role = Role.PATRON,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    is_verified: bool = False,
) -> User:
    """Insert a user with a fresh library card.

    A card number taken by a concurrent insert is retried with a new one; a
    taken email raises ConflictException.
    """
    email = normalize_email(email)
    password_hash = hash_password(password)

    for _ in range(settings.LIBRARY_CARD_MAX_ATTEMPTS):
        card_number = generate_library_card_number(repo)
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            role=role.value,
            phone=phone or None,
            address=address or None,
            library_card_number=card_number,
            is_verified=is_verified,
        )
        try:
            repo.add(user)
            repo.commit()
            return user
        except IntegrityError as e:
            repo.rollback()
            if not repo.card_number_exists(card_number):
                raise ConflictException("Email already in use") from e
            logger.warning("Library card number taken at insert, retrying", card_number=card_number)

    logger.error("Library card number space exhausted", attempts=settings.LIBRARY_CARD_MAX_ATTEMPTS)
    raise AppError("Could not allocate a library card number")


def register_user(repo: UserRepository, body: UserCreate) -> User:
    """Create an unverified account. Raises ConflictException when the email is taken."""
    if get_user_by_email(repo, body.email):
        raise ConflictException("Email already in use")

    user = create_user(
        repo,
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        phone=body.phone,
        address=body.address,
    )
    logger.info("User registered", user_id=user.id, role=user.role)
    return user


def authenticate_user(repo: UserRepository, email: str, password: str, role: Optional[Role] = None) -> User:
    """Check login credentials.

    Unknown email and wrong password fail with the same message; role
    mismatch and unverified accounts fail distinctly with 403.
    """
    user = get_user_by_email(repo, email)
    if user is None:
        # Keep response time close to the wrong-password path
        pwd_context.dummy_verify()
        raise UnauthorizedException(INVALID_CREDENTIALS)

    if role is not None and user.role != role.value:
        raise ForbiddenException("Role mismatch")

    if not user.is_verified:
        raise ForbiddenException("Email not verified")

    if not verify_password(password, user.password_hash):
        raise UnauthorizedException(INVALID_CREDENTIALS)

    return user
