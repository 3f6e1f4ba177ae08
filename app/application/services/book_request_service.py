"""Book request workflow: PENDING to APPROVED, REJECTED or CANCELLED.

Every terminal status is final. Approval moves the request, opens the loan
and takes a copy off the shelf inside a single database transaction; the
status change and the copy decrement are both guarded updates, so two
approvals racing for the last copy cannot both succeed.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import structlog

from app.config import get_settings
from app.core.exceptions import BusinessRuleViolationException, EntityNotFoundException, ForbiddenException
from app.domain.models.book_request import BookRequest
from app.domain.models.enums import RequestStatus, Role, STAFF_ROLES, TransactionStatus
from app.domain.models.transaction import Transaction
from app.domain.repositories.book_repository import BookRepository
from app.domain.repositories.book_request_repository import BookRequestRepository
from app.domain.repositories.transaction_repository import TransactionRepository
from app.domain.schemas.auth import AuthPayload
from app.domain.schemas.book_request import BookRequestFilter

settings = get_settings()
logger = structlog.get_logger(__name__)

ALREADY_PROCESSED = "Book request has already been processed"
NO_LONGER_AVAILABLE = "Book is no longer available"
ONLY_PENDING_CANCELLABLE = "Only pending requests can be cancelled"


def _load(requests: BookRequestRepository, request_id: int) -> BookRequest:
    book_request = requests.get_by_id(request_id)
    if book_request is None:
        raise EntityNotFoundException("Book request not found")
    return book_request


def create_request(
    requests: BookRequestRepository,
    books: BookRepository,
    actor: AuthPayload,
    book_id: int,
) -> BookRequest:
    """Patron asks for a book. Copies are only committed at approval time."""
    if actor.role != Role.PATRON:
        raise ForbiddenException("Only patrons can request books")

    book = books.get_by_id(book_id)
    if book is None:
        raise EntityNotFoundException("Book not found")
    if book.available_copies <= 0:
        raise BusinessRuleViolationException("Book is not available for request")
    if requests.find_pending(actor.id, book_id):
        raise BusinessRuleViolationException("You already have a pending request for this book")

    book_request = requests.add(
        BookRequest(user_id=actor.id, book_id=book_id, status=RequestStatus.PENDING.value)
    )
    requests.commit()
    logger.info("Book requested", request_id=book_request.id, user_id=actor.id, book_id=book_id)
    return _load(requests, book_request.id)


def process_request(
    requests: BookRequestRepository,
    books: BookRepository,
    transactions: TransactionRepository,
    actor: AuthPayload,
    request_id: int,
    status: RequestStatus,
    notes: Optional[str] = None,
) -> BookRequest:
    """Librarian/admin decision on a pending request."""
    if actor.role not in STAFF_ROLES:
        raise ForbiddenException("Only librarians and admins can process requests")

    try:
        book_request = requests.get_for_update(request_id)
        if book_request is None:
            raise EntityNotFoundException("Book request not found")
        if book_request.status != RequestStatus.PENDING.value:
            raise BusinessRuleViolationException(ALREADY_PROCESSED)

        if status == RequestStatus.APPROVED:
            book = books.get_for_update(book_request.book_id)
            if book is None or book.available_copies <= 0:
                raise BusinessRuleViolationException(NO_LONGER_AVAILABLE)

        now = datetime.now(timezone.utc)
        if not requests.transition(request_id, status.value, now, librarian_id=actor.id, notes=notes or None):
            raise BusinessRuleViolationException(ALREADY_PROCESSED)

        if status == RequestStatus.APPROVED:
            if not books.decrement_available(book_request.book_id):
                raise BusinessRuleViolationException(NO_LONGER_AVAILABLE)
            transactions.add(
                Transaction(
                    user_id=book_request.user_id,
                    book_id=book_request.book_id,
                    book_request_id=book_request.id,
                    borrowed_at=now,
                    due_date=now + timedelta(days=settings.LOAN_PERIOD_DAYS),
                    status=TransactionStatus.ACTIVE.value,
                )
            )

        requests.commit()
    except Exception:
        requests.rollback()
        raise

    logger.info(
        "Book request processed",
        request_id=request_id,
        status=status.value,
        librarian_id=actor.id,
    )
    return _load(requests, request_id)


def cancel_request(requests: BookRequestRepository, actor: AuthPayload, request_id: int) -> None:
    """Owner patron, or staff, withdraws a pending request. Copies are never touched."""
    try:
        book_request = requests.get_for_update(request_id)
        if book_request is None:
            raise EntityNotFoundException("Book request not found")
        if actor.role == Role.PATRON and book_request.user_id != actor.id:
            raise ForbiddenException("Forbidden")
        if book_request.status != RequestStatus.PENDING.value:
            raise BusinessRuleViolationException(ONLY_PENDING_CANCELLABLE)

        librarian_id = actor.id if actor.role in STAFF_ROLES else None
        if not requests.transition(
            request_id, RequestStatus.CANCELLED.value, datetime.now(timezone.utc), librarian_id=librarian_id
        ):
            raise BusinessRuleViolationException(ONLY_PENDING_CANCELLABLE)
        requests.commit()
    except Exception:
        requests.rollback()
        raise

    logger.info("Book request cancelled", request_id=request_id, by_user=actor.id, role=actor.role.value)


def list_requests(
    requests: BookRequestRepository,
    actor: AuthPayload,
    filters: BookRequestFilter,
) -> List[BookRequest]:
    # Patrons only ever see their own requests
    if actor.role == Role.PATRON:
        filters = filters.model_copy(update={"user_id": actor.id})
    return requests.list_filtered(filters)


def get_request(requests: BookRequestRepository, actor: AuthPayload, request_id: int) -> BookRequest:
    book_request = _load(requests, request_id)
    if actor.role == Role.PATRON and book_request.user_id != actor.id:
        raise ForbiddenException("Forbidden")
    return book_request
