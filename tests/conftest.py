import os

# Must be set before the app reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.exceptions import MailDeliveryException
from app.domain.models.enums import Role
from app.domain.models.user import User
from app.infrastructure.database import Base, SessionLocal, engine
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository
from app.application.services.auth_service import create_user
from app.interfaces.deps import get_mailer

ADMIN_EMAIL = "admin@library.org"
ADMIN_PASSWORD = "admin123"
PASSWORD = "secret123"


class FakeMailer:
    """Records OTP emails instead of talking to an SMTP relay."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send_otp_email(self, to: str, name: str, code: str) -> None:
        if self.fail:
            raise MailDeliveryException()
        self.sent.append({"to": to, "name": name, "code": code})

    def last_code(self, email: str) -> str:
        return [m["code"] for m in self.sent if m["to"] == email][-1]


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(mailer):
    Base.metadata.drop_all(bind=engine)
    app.dependency_overrides[get_mailer] = lambda: mailer
    # Entering the client runs the lifespan: tables + default admin
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(client):
    session = SessionLocal()
    yield session
    session.close()


def make_user(email: str, role: Role = Role.PATRON, verified: bool = True, name: str = "Test User") -> int:
    session = SessionLocal()
    try:
        repo = SQLAlchemyUserRepository(session, User)
        user = create_user(repo, name=name, email=email, password=PASSWORD, role=role, is_verified=verified)
        return user.id
    finally:
        session.close()


def login(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    """Log in and return Bearer headers; the client's cookie jar is left empty."""
    response = client.post("/api/users/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.cookies.get("auth")
    client.cookies.clear()
    return {"Authorization": f"Bearer {token}"}


def book_payload(**overrides) -> dict:
    payload = {
        "title": "Dune",
        "author": "Frank Herbert",
        "isbn": "9780441172719",
        "category": "Fiction",
        "publisher": "Ace",
        "publication_date": date(1990, 9, 1).isoformat(),
        "total_copies": 2,
        "available_copies": 2,
        "description": "Spice.",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def admin_headers(client):
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def librarian_headers(client):
    make_user("librarian@library.org", Role.LIBRARIAN, name="Libby")
    return login(client, "librarian@library.org")


@pytest.fixture
def patron_headers(client):
    make_user("patron@library.org", name="Pat")
    return login(client, "patron@library.org")


@pytest.fixture
def other_patron_headers(client):
    make_user("other@library.org", name="Olive")
    return login(client, "other@library.org")


@pytest.fixture
def make_book(client, librarian_headers):
    def _make_book(**overrides) -> dict:
        response = client.post("/api/books", json=book_payload(**overrides), headers=librarian_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_book
