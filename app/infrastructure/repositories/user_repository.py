"""
SQLAlchemy implementation of the User Repository.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import update

from app.domain.models.otp_verification import OtpVerification
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """User repository implementation using SQLAlchemy."""

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def card_number_exists(self, card_number: str) -> bool:
        return (
            self.db.query(User.id)
            .filter(User.library_card_number == card_number)
            .first()
            is not None
        )

    def list_newest_first(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    def supersede_open_otps(self, user_id: int) -> int:
        result = self.db.execute(
            update(OtpVerification)
            .where(
                OtpVerification.user_id == user_id,
                OtpVerification.consumed.is_(False),
                OtpVerification.superseded.is_(False),
            )
            .values(superseded=True)
        )
        return result.rowcount

    def find_valid_otp(self, user_id: int, code: str, now: datetime) -> Optional[OtpVerification]:
        return (
            self.db.query(OtpVerification)
            .filter(
                OtpVerification.user_id == user_id,
                OtpVerification.code == code,
                OtpVerification.consumed.is_(False),
                OtpVerification.superseded.is_(False),
                OtpVerification.expires_at > now,
            )
            .order_by(OtpVerification.created_at.desc(), OtpVerification.id.desc())
            .first()
        )
