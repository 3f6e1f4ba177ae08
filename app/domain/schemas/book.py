"""Pydantic schemas for the book catalog."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

MAX_DESCRIPTION_LENGTH = 10_000
MAX_URL_LENGTH = 2_000


class CategoryRead(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class BookBase(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    author: str = Field(min_length=1, max_length=200)
    isbn: str = Field(min_length=1, max_length=20)
    category: str = Field(min_length=1, max_length=100)
    publisher: str = Field(min_length=1, max_length=200)
    publication_date: date
    total_copies: int = Field(ge=0)
    available_copies: int = Field(ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None
    ebook_url: Optional[str] = None

    @model_validator(mode="after")
    def check_copies(self):
        if self.available_copies > self.total_copies:
            raise ValueError("available_copies cannot exceed total_copies")
        return self


class BookCreate(BookBase):
    pass


class BookUpdate(BookBase):
    pass


class BookRead(BaseModel):
    id: int
    title: str
    author: str
    isbn: str
    category: CategoryRead
    publisher: str
    publication_date: date
    total_copies: int
    available_copies: int
    description: Optional[str] = None
    image_url: Optional[str] = None
    ebook_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BookSummary(BaseModel):
    id: int
    title: str
    author: str
    isbn: str
    available_copies: int
    total_copies: int
    image_url: Optional[str] = None

    model_config = {"from_attributes": True}
