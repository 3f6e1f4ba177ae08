"""Book request: a patron's ask to borrow a book, pending librarian review."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.infrastructure.database import Base
from app.domain.models.enums import RequestStatus


class BookRequest(Base):
    __tablename__ = "book_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=RequestStatus.PENDING.value, index=True)
    request_date = Column(DateTime(timezone=True), server_default=func.now())
    librarian_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", foreign_keys=[user_id])
    librarian = relationship("User", foreign_keys=[librarian_id])
    book = relationship("Book", back_populates="requests")

    def __repr__(self):
        return f"<BookRequest {self.id} user={self.user_id} book={self.book_id} {self.status}>"
