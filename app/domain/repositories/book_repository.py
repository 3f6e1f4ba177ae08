"""
Book Repository Interface.
Catalog reads and writes, category registry and copy accounting.
"""

from typing import List, Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.book import Book
from app.domain.models.category import Category


class BookRepository(BaseRepository[Book]):
    """Interface for Book-specific operations."""

    def list_with_category(self) -> List[Book]:
        ...

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        ...

    def get_for_update(self, book_id: int) -> Optional[Book]:
        """Load a book holding a row lock until the unit of work ends."""
        ...

    def get_or_create_category(self, name: str) -> Category:
        """Find a category by case-insensitive trimmed name, creating it if missing."""
        ...

    def decrement_available(self, book_id: int) -> bool:
        """Take one copy off the shelf. False when none is left."""
        ...

    def increment_available(self, book_id: int) -> bool:
        """Put one copy back. False when the shelf is already full."""
        ...

    def count_outstanding(self, book_id: int) -> int:
        """Pending requests plus active loans referencing the book."""
        ...
