"""Books API routes: public catalog reads, staff-only writes."""

from fastapi import APIRouter, Depends, status

from app.application.services.book_service import create_book, delete_book, get_book, list_books, update_book
from app.domain.repositories.book_repository import BookRepository
from app.domain.schemas.auth import AuthPayload
from app.domain.schemas.book import BookCreate, BookRead, BookUpdate
from app.interfaces.api.deps import require_staff
from app.interfaces.deps import get_book_repository

router = APIRouter(prefix="/api/books", tags=["Books"])


@router.get("", response_model=list[BookRead])
def list_catalog(repo: BookRepository = Depends(get_book_repository)):
    return [BookRead.model_validate(b) for b in list_books(repo)]


@router.post("", response_model=BookRead, status_code=status.HTTP_201_CREATED)
def add_book(
    body: BookCreate,
    repo: BookRepository = Depends(get_book_repository),
    user: AuthPayload = Depends(require_staff),
):
    return BookRead.model_validate(create_book(repo, body))


@router.get("/{book_id}", response_model=BookRead)
def read_book(book_id: int, repo: BookRepository = Depends(get_book_repository)):
    return BookRead.model_validate(get_book(repo, book_id))


@router.put("/{book_id}", response_model=BookRead)
def edit_book(
    book_id: int,
    body: BookUpdate,
    repo: BookRepository = Depends(get_book_repository),
    user: AuthPayload = Depends(require_staff),
):
    return BookRead.model_validate(update_book(repo, book_id, body))


@router.delete("/{book_id}")
def remove_book(
    book_id: int,
    repo: BookRepository = Depends(get_book_repository),
    user: AuthPayload = Depends(require_staff),
):
    delete_book(repo, book_id)
    return {"success": True}
