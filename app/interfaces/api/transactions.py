"""Loan transaction API routes: list loans, record returns."""

from typing import Optional

from fastapi import APIRouter, Depends

from app.application.services.loan_service import list_transactions, return_transaction
from app.domain.models.enums import TransactionStatus
from app.domain.repositories.book_repository import BookRepository
from app.domain.repositories.transaction_repository import TransactionRepository
from app.domain.schemas.auth import AuthPayload
from app.domain.schemas.book_request import TransactionFilter, TransactionRead
from app.interfaces.api.deps import get_current_user
from app.interfaces.deps import get_book_repository, get_transaction_repository

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.get("", response_model=list[TransactionRead])
def list_loans(
    user_id: Optional[int] = None,
    status: Optional[TransactionStatus] = None,
    transactions: TransactionRepository = Depends(get_transaction_repository),
    user: AuthPayload = Depends(get_current_user),
):
    filters = TransactionFilter(user_id=user_id, status=status)
    return [TransactionRead.model_validate(t) for t in list_transactions(transactions, user, filters)]


@router.post("/{transaction_id}/return", response_model=TransactionRead)
def return_loan(
    transaction_id: int,
    transactions: TransactionRepository = Depends(get_transaction_repository),
    books: BookRepository = Depends(get_book_repository),
    user: AuthPayload = Depends(get_current_user),
):
    return TransactionRead.model_validate(return_transaction(transactions, books, user, transaction_id))
