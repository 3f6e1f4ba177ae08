"""
Base Repository Interface.
Defines the standard contract for data access operations.
"""

from typing import Optional, Protocol, TypeVar

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for generic CRUD operations."""

    def get_by_id(self, id: int) -> Optional[T]:
        """Get a single entity by ID."""
        ...

    def add(self, obj: T) -> T:
        """Stage a new entity in the current unit of work (no commit)."""
        ...

    def delete(self, id: int) -> Optional[T]:
        """Delete an entity by ID."""
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
