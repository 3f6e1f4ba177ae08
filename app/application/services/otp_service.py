"""OTP service: issue, deliver and verify email verification codes."""

import secrets
from datetime import datetime, timedelta, timezone

import structlog

from app.config import get_settings
from app.core.exceptions import BusinessRuleViolationException, EntityNotFoundException, MailDeliveryException
from app.domain.models.otp_verification import OtpVerification
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.infrastructure.mailer import Mailer
from app.application.services.auth_service import get_user_by_email

settings = get_settings()
logger = structlog.get_logger(__name__)


def generate_otp_code() -> str:
    return f"{100000 + secrets.randbelow(900000)}"


def issue_otp(repo: UserRepository, mailer: Mailer, user: User) -> OtpVerification:
    """Replace the user's outstanding codes with a fresh one and email it.

    The new code is only committed once the mail relay accepted the message.
    """
    now = datetime.now(timezone.utc)
    try:
        repo.supersede_open_otps(user.id)
        otp = repo.add(
            OtpVerification(
                user_id=user.id,
                code=generate_otp_code(),
                expires_at=now + timedelta(minutes=settings.OTP_EXPIRATION_MINUTES),
            )
        )
        mailer.send_otp_email(to=user.email, name=user.name, code=otp.code)
        repo.commit()
    except Exception:
        repo.rollback()
        raise

    logger.info("OTP issued", user_id=user.id, expires_at=otp.expires_at.isoformat())
    return otp


def send_initial_otp(repo: UserRepository, mailer: Mailer, user: User) -> bool:
    """First code after registration. Delivery failure leaves the account usable via resend."""
    try:
        issue_otp(repo, mailer, user)
    except MailDeliveryException:
        logger.warning("Initial OTP could not be delivered", user_id=user.id)
        return False
    return True


def resend_otp(repo: UserRepository, mailer: Mailer, email: str) -> str:
    user = get_user_by_email(repo, email)
    if user is None:
        raise EntityNotFoundException("User not found")
    if user.is_verified:
        return "Already verified"

    issue_otp(repo, mailer, user)
    return "OTP sent"


def verify_otp(repo: UserRepository, user_id: int, code: str) -> User:
    """Mark the user verified and the code consumed, together or not at all."""
    now = datetime.now(timezone.utc)
    otp = repo.find_valid_otp(user_id, code, now)
    if otp is None:
        raise BusinessRuleViolationException("Invalid or expired OTP")

    user = repo.get_by_id(user_id)
    try:
        user.is_verified = True
        otp.consumed = True
        repo.commit()
    except Exception:
        repo.rollback()
        raise

    logger.info("User verified", user_id=user_id)
    return user
