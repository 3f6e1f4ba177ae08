"""Pydantic schemas for book requests and loan transactions."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from app.domain.models.enums import RequestStatus, TransactionStatus
from app.domain.schemas.book import BookSummary


class BookRequestCreate(BaseModel):
    book_id: int


class BookRequestProcess(BaseModel):
    status: RequestStatus
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, value: RequestStatus) -> RequestStatus:
        if value == RequestStatus.PENDING:
            raise ValueError("Invalid status. Must be APPROVED, REJECTED, or CANCELLED")
        return value


class BookRequestFilter(BaseModel):
    user_id: Optional[int] = None
    status: Optional[RequestStatus] = None


class RequestUser(BaseModel):
    id: int
    name: str
    email: str
    library_card_number: str

    model_config = {"from_attributes": True}


class RequestLibrarian(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class BookRequestRead(BaseModel):
    id: int
    user_id: int
    book_id: int
    status: RequestStatus
    request_date: Optional[datetime] = None
    librarian_id: Optional[int] = None
    processed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    user: RequestUser
    book: BookSummary
    librarian: Optional[RequestLibrarian] = None

    model_config = {"from_attributes": True}


class TransactionFilter(BaseModel):
    user_id: Optional[int] = None
    status: Optional[TransactionStatus] = None


class TransactionRead(BaseModel):
    id: int
    user_id: int
    book_id: int
    book_request_id: Optional[int] = None
    borrowed_at: datetime
    due_date: datetime
    returned_at: Optional[datetime] = None
    status: TransactionStatus
    user: RequestUser
    book: BookSummary

    model_config = {"from_attributes": True}
