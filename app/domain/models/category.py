"""Book category: maps to the 'categories' table."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)

    books = relationship("Book", back_populates="category")

    def __repr__(self):
        return f"<Category {self.name}>"
