"""Loan service: listing and returning loan transactions."""

from datetime import datetime, timezone
from typing import List

import structlog

from app.core.exceptions import BusinessRuleViolationException, EntityNotFoundException, ForbiddenException
from app.domain.models.enums import Role, STAFF_ROLES, TransactionStatus
from app.domain.models.transaction import Transaction
from app.domain.repositories.book_repository import BookRepository
from app.domain.repositories.transaction_repository import TransactionRepository
from app.domain.schemas.auth import AuthPayload
from app.domain.schemas.book_request import TransactionFilter

logger = structlog.get_logger(__name__)


def list_transactions(
    transactions: TransactionRepository,
    actor: AuthPayload,
    filters: TransactionFilter,
) -> List[Transaction]:
    if actor.role == Role.PATRON:
        filters = filters.model_copy(update={"user_id": actor.id})
    return transactions.list_filtered(filters)


def return_transaction(
    transactions: TransactionRepository,
    books: BookRepository,
    actor: AuthPayload,
    transaction_id: int,
) -> Transaction:
    """Close an active loan and put the copy back on the shelf."""
    if actor.role not in STAFF_ROLES:
        raise ForbiddenException("Only librarians and admins can record returns")

    try:
        loan = transactions.get_for_update(transaction_id)
        if loan is None:
            raise EntityNotFoundException("Transaction not found")
        if loan.status != TransactionStatus.ACTIVE.value:
            raise BusinessRuleViolationException("Book has already been returned")

        loan.status = TransactionStatus.RETURNED.value
        loan.returned_at = datetime.now(timezone.utc)
        if not books.increment_available(loan.book_id):
            # Inventory was reduced while the copy was out
            logger.warning("Returned copy exceeds total copies", book_id=loan.book_id)
        transactions.commit()
    except Exception:
        transactions.rollback()
        raise

    logger.info("Loan returned", transaction_id=transaction_id, librarian_id=actor.id)
    return transactions.get_by_id(transaction_id)
