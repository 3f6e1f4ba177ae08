"""Loan transaction: created when a book request is approved."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.infrastructure.database import Base
from app.domain.models.enums import TransactionStatus


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    book_request_id = Column(Integer, ForeignKey("book_requests.id", ondelete="SET NULL"), nullable=True)
    borrowed_at = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)
    returned_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(20), nullable=False, default=TransactionStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User")
    book = relationship("Book", back_populates="transactions")

    def __repr__(self):
        return f"<Transaction {self.id} book={self.book_id} due={self.due_date:%Y-%m-%d}>"
