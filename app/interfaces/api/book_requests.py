"""Book request API routes: create, list, read, process, cancel."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from app.application.services.book_request_service import (
    cancel_request,
    create_request,
    get_request,
    list_requests,
    process_request,
)
from app.domain.models.enums import RequestStatus
from app.domain.repositories.book_repository import BookRepository
from app.domain.repositories.book_request_repository import BookRequestRepository
from app.domain.repositories.transaction_repository import TransactionRepository
from app.domain.schemas.auth import AuthPayload, MessageResponse
from app.domain.schemas.book_request import (
    BookRequestCreate,
    BookRequestFilter,
    BookRequestProcess,
    BookRequestRead,
)
from app.interfaces.api.deps import get_current_user
from app.interfaces.deps import get_book_repository, get_book_request_repository, get_transaction_repository

router = APIRouter(prefix="/api/book-requests", tags=["Book Requests"])


@router.get("", response_model=list[BookRequestRead])
def list_book_requests(
    user_id: Optional[int] = None,
    status: Optional[RequestStatus] = None,
    requests: BookRequestRepository = Depends(get_book_request_repository),
    user: AuthPayload = Depends(get_current_user),
):
    filters = BookRequestFilter(user_id=user_id, status=status)
    return [BookRequestRead.model_validate(r) for r in list_requests(requests, user, filters)]


@router.post("", response_model=BookRequestRead, status_code=status.HTTP_201_CREATED)
def create_book_request(
    body: BookRequestCreate,
    requests: BookRequestRepository = Depends(get_book_request_repository),
    books: BookRepository = Depends(get_book_repository),
    user: AuthPayload = Depends(get_current_user),
):
    return BookRequestRead.model_validate(create_request(requests, books, user, body.book_id))


@router.get("/{request_id}", response_model=BookRequestRead)
def read_book_request(
    request_id: int,
    requests: BookRequestRepository = Depends(get_book_request_repository),
    user: AuthPayload = Depends(get_current_user),
):
    return BookRequestRead.model_validate(get_request(requests, user, request_id))


@router.patch("/{request_id}", response_model=BookRequestRead)
def process_book_request(
    request_id: int,
    body: BookRequestProcess,
    requests: BookRequestRepository = Depends(get_book_request_repository),
    books: BookRepository = Depends(get_book_repository),
    transactions: TransactionRepository = Depends(get_transaction_repository),
    user: AuthPayload = Depends(get_current_user),
):
    book_request = process_request(requests, books, transactions, user, request_id, body.status, body.notes)
    return BookRequestRead.model_validate(book_request)


@router.delete("/{request_id}", response_model=MessageResponse)
def cancel_book_request(
    request_id: int,
    requests: BookRequestRepository = Depends(get_book_request_repository),
    user: AuthPayload = Depends(get_current_user),
):
    cancel_request(requests, user, request_id)
    return MessageResponse(message="Book request cancelled successfully")
