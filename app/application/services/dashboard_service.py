"""Dashboard service: role-scoped counters for the dashboards."""

from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.models.book import Book
from app.domain.models.book_request import BookRequest
from app.domain.models.enums import RequestStatus, Role, TransactionStatus
from app.domain.models.transaction import Transaction
from app.domain.models.user import User
from app.domain.schemas.auth import AuthPayload


def get_dashboard_stats(db: Session, actor: AuthPayload) -> dict:
    """Catalog totals for everyone; request and loan counts scoped to the caller."""
    now = datetime.now(timezone.utc)

    total_titles = db.query(func.count(Book.id)).scalar() or 0
    available_titles = db.query(func.count(Book.id)).filter(Book.available_copies > 0).scalar() or 0
    total_copies = db.query(func.coalesce(func.sum(Book.total_copies), 0)).scalar()
    available_copies = db.query(func.coalesce(func.sum(Book.available_copies), 0)).scalar()

    requests = db.query(func.count(BookRequest.id)).filter(
        BookRequest.status == RequestStatus.PENDING.value
    )
    loans = db.query(func.count(Transaction.id)).filter(
        Transaction.status == TransactionStatus.ACTIVE.value
    )
    overdue = loans.filter(Transaction.due_date < now)
    if actor.role == Role.PATRON:
        requests = requests.filter(BookRequest.user_id == actor.id)
        loans = loans.filter(Transaction.user_id == actor.id)
        overdue = overdue.filter(Transaction.user_id == actor.id)

    stats = {
        "total_titles": total_titles,
        "available_titles": available_titles,
        "total_copies": int(total_copies),
        "available_copies": int(available_copies),
        "pending_requests": requests.scalar() or 0,
        "active_loans": loans.scalar() or 0,
        "overdue_loans": overdue.scalar() or 0,
    }

    if actor.role == Role.ADMIN:
        stats["users_by_role"] = {
            role: count
            for role, count in db.query(User.role, func.count(User.id)).group_by(User.role).all()
        }

    return stats
