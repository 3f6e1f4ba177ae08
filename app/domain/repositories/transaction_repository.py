"""
Loan Transaction Repository Interface.
"""

from typing import List, Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.transaction import Transaction
from app.domain.schemas.book_request import TransactionFilter


class TransactionRepository(BaseRepository[Transaction]):
    """Interface for Transaction-specific operations."""

    def get_for_update(self, transaction_id: int) -> Optional[Transaction]:
        ...

    def list_filtered(self, filters: TransactionFilter) -> List[Transaction]:
        """Loans matching the filters, newest first."""
        ...
