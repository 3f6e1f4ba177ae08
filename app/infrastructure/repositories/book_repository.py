"""
SQLAlchemy implementation of the Book Repository.
"""

from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import joinedload

from app.domain.models.book import Book
from app.domain.models.book_request import BookRequest
from app.domain.models.category import Category
from app.domain.models.enums import RequestStatus, TransactionStatus
from app.domain.models.transaction import Transaction
from app.domain.repositories.book_repository import BookRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyBookRepository(SQLAlchemyRepository[Book], BookRepository):
    """Book repository implementation using SQLAlchemy."""

    def list_with_category(self) -> List[Book]:
        return (
            self.db.query(Book)
            .options(joinedload(Book.category))
            .order_by(Book.title.asc(), Book.id.asc())
            .all()
        )

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        return self.db.query(Book).filter(Book.isbn == isbn).first()

    def get_for_update(self, book_id: int) -> Optional[Book]:
        # FOR UPDATE is silently dropped on SQLite, which serializes writers anyway
        return (
            self.db.query(Book)
            .filter(Book.id == book_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def get_or_create_category(self, name: str) -> Category:
        clean = " ".join(name.split())
        category = (
            self.db.query(Category)
            .filter(func.lower(Category.name) == clean.lower())
            .first()
        )
        if category is None:
            category = Category(name=clean)
            self.db.add(category)
            self.db.flush()
        return category

    def decrement_available(self, book_id: int) -> bool:
        result = self.db.execute(
            update(Book)
            .where(Book.id == book_id, Book.available_copies > 0)
            .values(available_copies=Book.available_copies - 1)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def increment_available(self, book_id: int) -> bool:
        result = self.db.execute(
            update(Book)
            .where(Book.id == book_id, Book.available_copies < Book.total_copies)
            .values(available_copies=Book.available_copies + 1)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def count_outstanding(self, book_id: int) -> int:
        pending = (
            self.db.query(func.count(BookRequest.id))
            .filter(BookRequest.book_id == book_id, BookRequest.status == RequestStatus.PENDING.value)
            .scalar()
            or 0
        )
        active = (
            self.db.query(func.count(Transaction.id))
            .filter(Transaction.book_id == book_id, Transaction.status == TransactionStatus.ACTIVE.value)
            .scalar()
            or 0
        )
        return pending + active
