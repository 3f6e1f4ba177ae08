"""
SQLAlchemy implementation of the Book Request Repository.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import joinedload

from app.domain.models.book_request import BookRequest
from app.domain.models.enums import RequestStatus
from app.domain.repositories.book_request_repository import BookRequestRepository
from app.domain.schemas.book_request import BookRequestFilter
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyBookRequestRepository(SQLAlchemyRepository[BookRequest], BookRequestRepository):
    """BookRequest repository implementation using SQLAlchemy."""

    def _with_relations(self):
        return self.db.query(BookRequest).options(
            joinedload(BookRequest.user),
            joinedload(BookRequest.book),
            joinedload(BookRequest.librarian),
        )

    def get_by_id(self, id: int) -> Optional[BookRequest]:
        return self._with_relations().filter(BookRequest.id == id).first()

    def get_for_update(self, request_id: int) -> Optional[BookRequest]:
        return (
            self.db.query(BookRequest)
            .filter(BookRequest.id == request_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def find_pending(self, user_id: int, book_id: int) -> Optional[BookRequest]:
        return (
            self.db.query(BookRequest)
            .filter(
                BookRequest.user_id == user_id,
                BookRequest.book_id == book_id,
                BookRequest.status == RequestStatus.PENDING.value,
            )
            .first()
        )

    def list_filtered(self, filters: BookRequestFilter) -> List[BookRequest]:
        query = self._with_relations()

        if filters.user_id is not None:
            query = query.filter(BookRequest.user_id == filters.user_id)
        if filters.status is not None:
            query = query.filter(BookRequest.status == filters.status.value)

        return query.order_by(BookRequest.created_at.desc(), BookRequest.id.desc()).all()

    def transition(
        self,
        request_id: int,
        to_status: str,
        processed_at: datetime,
        librarian_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> bool:
        values = {"status": to_status, "processed_at": processed_at}
        if librarian_id is not None:
            values["librarian_id"] = librarian_id
            values["notes"] = notes
        result = self.db.execute(
            update(BookRequest)
            .where(BookRequest.id == request_id, BookRequest.status == RequestStatus.PENDING.value)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1
