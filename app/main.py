"""FastAPI application: main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.infrastructure.database import engine, Base, SessionLocal
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.core.exceptions import register_exception_handlers

# Import all models so SQLAlchemy knows about them
from app.domain.models.user import User
from app.domain.models.otp_verification import OtpVerification
from app.domain.models.category import Category
from app.domain.models.book import Book
from app.domain.models.book_request import BookRequest
from app.domain.models.transaction import Transaction
from app.domain.models.enums import Role

# Import routers
from app.interfaces.api.users import router as users_router
from app.interfaces.api.books import router as books_router
from app.interfaces.api.book_requests import router as book_requests_router
from app.interfaces.api.transactions import router as transactions_router
from app.interfaces.api.dashboard import router as dashboard_router
from app.interfaces.pages import router as pages_router

settings = get_settings()

configure_logging()
logger = structlog.get_logger(__name__)


def ensure_default_admin() -> None:
    from app.application.services.auth_service import create_user, get_user_by_email
    from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

    db = SessionLocal()
    try:
        repo = SQLAlchemyUserRepository(db, User)
        if not get_user_by_email(repo, settings.DEFAULT_ADMIN_EMAIL):
            create_user(
                repo,
                name="Admin",
                email=settings.DEFAULT_ADMIN_EMAIL,
                password=settings.DEFAULT_ADMIN_PASSWORD,
                role=Role.ADMIN,
                is_verified=True,
            )
            logger.info("Default admin user created", email=settings.DEFAULT_ADMIN_EMAIL)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting Library Management System...", env=settings.ENVIRONMENT)

    # Dev convenience; production schemas come from migrations
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    ensure_default_admin()

    yield

    logger.info("Library Management System stopped")


app = FastAPI(
    title="Library Management System",
    description="API Backend: catalog, book requests, loans and OTP-verified accounts",
    version="1.0.0",
    lifespan=lifespan,
)

setup_middleware(app)
register_exception_handlers(app)

# Added last so it runs first and answers preflight requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router)
app.include_router(books_router)
app.include_router(book_requests_router)
app.include_router(transactions_router)
app.include_router(dashboard_router)
app.include_router(pages_router)


@app.get("/")
def root():
    return {
        "name": "Library Management System",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
