"""Book service: catalog CRUD with field caps and category registry."""

from typing import List

import structlog
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictException, EntityNotFoundException, ValidationException
from app.domain.models.book import Book
from app.domain.repositories.book_repository import BookRepository
from app.domain.schemas.book import BookBase, BookCreate, BookUpdate, MAX_DESCRIPTION_LENGTH, MAX_URL_LENGTH

logger = structlog.get_logger(__name__)

DUPLICATE_ISBN = "A book with this ISBN already exists."


def validate_book_fields(body: BookBase) -> None:
    """Length caps shared by create and update."""
    if body.description and len(body.description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationException("Description is too long. Please keep it under 10,000 characters.")
    if body.image_url and len(body.image_url) > MAX_URL_LENGTH:
        raise ValidationException("Image URL is too long. Please keep it under 2,000 characters.")
    if body.ebook_url and len(body.ebook_url) > MAX_URL_LENGTH:
        raise ValidationException("E-book URL is too long. Please keep it under 2,000 characters.")


def _apply(book: Book, body: BookBase, repo: BookRepository) -> None:
    category = repo.get_or_create_category(body.category)
    book.title = body.title
    book.author = body.author
    book.isbn = body.isbn
    book.category = category
    book.publisher = body.publisher
    book.publication_date = body.publication_date
    book.total_copies = body.total_copies
    book.available_copies = body.available_copies
    book.description = body.description or None
    book.image_url = body.image_url or None
    book.ebook_url = body.ebook_url or None


def _save(repo: BookRepository, new_book: Book | None = None) -> None:
    try:
        if new_book is not None:
            repo.add(new_book)
        repo.commit()
    except IntegrityError as e:
        repo.rollback()
        # ISBN is the only unique column a client controls
        raise ConflictException(DUPLICATE_ISBN) from e


def list_books(repo: BookRepository) -> List[Book]:
    return repo.list_with_category()


def get_book(repo: BookRepository, book_id: int) -> Book:
    book = repo.get_by_id(book_id)
    if book is None:
        raise EntityNotFoundException("Book not found")
    return book


def create_book(repo: BookRepository, body: BookCreate) -> Book:
    validate_book_fields(body)
    if repo.get_by_isbn(body.isbn):
        raise ConflictException(DUPLICATE_ISBN)

    book = Book()
    _apply(book, body, repo)
    _save(repo, new_book=book)
    logger.info("Book created", book_id=book.id, isbn=book.isbn)
    return book


def update_book(repo: BookRepository, book_id: int, body: BookUpdate) -> Book:
    book = get_book(repo, book_id)
    validate_book_fields(body)
    existing = repo.get_by_isbn(body.isbn)
    if existing is not None and existing.id != book.id:
        raise ConflictException(DUPLICATE_ISBN)

    _apply(book, body, repo)
    _save(repo)
    logger.info("Book updated", book_id=book.id)
    return book


def delete_book(repo: BookRepository, book_id: int) -> None:
    """Hard delete. Refused while the book has pending requests or active loans."""
    book = get_book(repo, book_id)
    outstanding = repo.count_outstanding(book.id)
    if outstanding:
        raise ConflictException(
            "Book has pending requests or active loans and cannot be deleted",
            details={"outstanding": outstanding},
        )
    repo.delete(book.id)
    logger.info("Book deleted", book_id=book_id)
