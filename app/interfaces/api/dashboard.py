"""Dashboard API: role-scoped counters for the frontend dashboards."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.application.services.dashboard_service import get_dashboard_stats
from app.domain.schemas.auth import AuthPayload
from app.infrastructure.database import get_db
from app.interfaces.api.deps import get_current_user

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats")
def dashboard_stats(
    db: Session = Depends(get_db),
    user: AuthPayload = Depends(get_current_user),
):
    return get_dashboard_stats(db, user)
