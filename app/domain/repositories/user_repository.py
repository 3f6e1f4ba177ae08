"""
User Repository Interface.
Defines data access operations for users and their OTP codes.
"""

from datetime import datetime
from typing import List, Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.user import User
from app.domain.models.otp_verification import OtpVerification


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def get_by_email(self, email: str) -> Optional[User]:
        ...

    def card_number_exists(self, card_number: str) -> bool:
        ...

    def list_newest_first(self) -> List[User]:
        ...

    def supersede_open_otps(self, user_id: int) -> int:
        """Invalidate every unconsumed code of the user. Returns rows touched."""
        ...

    def find_valid_otp(self, user_id: int, code: str, now: datetime) -> Optional[OtpVerification]:
        """Most recent unconsumed, non-superseded, unexpired code matching user and code."""
        ...
