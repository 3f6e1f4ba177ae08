"""
API Dependencies.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from app.infrastructure.database import get_db
from app.infrastructure.mailer import Mailer, SMTPMailer
from app.domain.models.book import Book
from app.domain.models.book_request import BookRequest
from app.domain.models.transaction import Transaction
from app.domain.models.user import User
from app.domain.repositories.book_repository import BookRepository
from app.domain.repositories.book_request_repository import BookRequestRepository
from app.domain.repositories.transaction_repository import TransactionRepository
from app.domain.repositories.user_repository import UserRepository
from app.infrastructure.repositories.book_repository import SQLAlchemyBookRepository
from app.infrastructure.repositories.book_request_repository import SQLAlchemyBookRequestRepository
from app.infrastructure.repositories.transaction_repository import SQLAlchemyTransactionRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return SQLAlchemyUserRepository(db, User)


def get_book_repository(db: Session = Depends(get_db)) -> BookRepository:
    """Get book repository instance."""
    return SQLAlchemyBookRepository(db, Book)


def get_book_request_repository(db: Session = Depends(get_db)) -> BookRequestRepository:
    """Get book request repository instance."""
    return SQLAlchemyBookRequestRepository(db, BookRequest)


def get_transaction_repository(db: Session = Depends(get_db)) -> TransactionRepository:
    """Get transaction repository instance."""
    return SQLAlchemyTransactionRepository(db, Transaction)


def get_mailer() -> Mailer:
    return SMTPMailer()
