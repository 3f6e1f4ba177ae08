"""Seed the catalog from a JSON file of categories and books.

Usage: python scripts/seed_books.py [path/to/books.json]

Categories are matched by name and books by ISBN; existing rows are left
untouched, so the script can be re-run safely.
"""

import json
import sys
import os
from datetime import date
from urllib.parse import quote

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.infrastructure.database import Base, SessionLocal, engine
from app.domain.models.book import Book
from app.domain.models.book_request import BookRequest  # noqa: F401  (mapper registry)
from app.domain.models.transaction import Transaction  # noqa: F401
from app.domain.models.user import User  # noqa: F401
from app.domain.models.otp_verification import OtpVerification  # noqa: F401
from app.infrastructure.repositories.book_repository import SQLAlchemyBookRepository

DEFAULT_DATA_FILE = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "books.json")


def placeholder_image(book: dict) -> str:
    seed = quote(book.get("isbn") or book["title"], safe="")
    return f"https://picsum.photos/seed/{seed}/600/400"


def seed(data_file: str) -> tuple[int, int]:
    with open(data_file, encoding="utf-8") as f:
        data = json.load(f)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    created = skipped = 0
    try:
        repo = SQLAlchemyBookRepository(db, Book)
        categories = {name: repo.get_or_create_category(name) for name in data.get("categories", [])}

        for entry in data.get("books", []):
            if repo.get_by_isbn(entry["isbn"]):
                skipped += 1
                continue
            category = categories.get(entry["category"]) or repo.get_or_create_category(entry["category"])
            repo.add(
                Book(
                    title=entry["title"],
                    author=entry["author"],
                    isbn=entry["isbn"],
                    category=category,
                    publisher=entry["publisher"],
                    publication_date=date.fromisoformat(entry["publicationDate"]),
                    total_copies=entry["totalCopies"],
                    available_copies=entry["availableCopies"],
                    description=entry.get("description"),
                    image_url=entry.get("imageUrl") or placeholder_image(entry),
                    ebook_url=entry.get("ebookUrl"),
                )
            )
            created += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return created, skipped


if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DATA_FILE
    print(f"Seeding catalog from {path}...")
    created, skipped = seed(path)
    print(f"Done: {created} books created, {skipped} already present.")
