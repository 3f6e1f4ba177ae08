"""
SQLAlchemy implementation of the Transaction Repository.
"""

from typing import List, Optional

from sqlalchemy.orm import joinedload

from app.domain.models.transaction import Transaction
from app.domain.repositories.transaction_repository import TransactionRepository
from app.domain.schemas.book_request import TransactionFilter
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyTransactionRepository(SQLAlchemyRepository[Transaction], TransactionRepository):
    """Transaction repository implementation using SQLAlchemy."""

    def get_by_id(self, id: int) -> Optional[Transaction]:
        return (
            self.db.query(Transaction)
            .options(joinedload(Transaction.user), joinedload(Transaction.book))
            .filter(Transaction.id == id)
            .first()
        )

    def get_for_update(self, transaction_id: int) -> Optional[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(Transaction.id == transaction_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def list_filtered(self, filters: TransactionFilter) -> List[Transaction]:
        query = self.db.query(Transaction).options(
            joinedload(Transaction.user), joinedload(Transaction.book)
        )
        if filters.user_id is not None:
            query = query.filter(Transaction.user_id == filters.user_id)
        if filters.status is not None:
            query = query.filter(Transaction.status == filters.status.value)
        return query.order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()
