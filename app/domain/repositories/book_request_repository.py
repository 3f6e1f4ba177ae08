"""
Book Request Repository Interface.
"""

from datetime import datetime
from typing import List, Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.book_request import BookRequest
from app.domain.schemas.book_request import BookRequestFilter


class BookRequestRepository(BaseRepository[BookRequest]):
    """Interface for BookRequest-specific operations."""

    def get_for_update(self, request_id: int) -> Optional[BookRequest]:
        ...

    def find_pending(self, user_id: int, book_id: int) -> Optional[BookRequest]:
        ...

    def list_filtered(self, filters: BookRequestFilter) -> List[BookRequest]:
        """Requests matching the filters, newest first."""
        ...

    def transition(
        self,
        request_id: int,
        to_status: str,
        processed_at: datetime,
        librarian_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> bool:
        """Move a PENDING request to a terminal status. False if it was not PENDING."""
        ...
