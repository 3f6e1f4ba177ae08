"""Page endpoints behind RoleGateMiddleware.

The browser UI renders these pages; the backend only answers with which
page the visitor landed on. Access has already been decided from the role
cookie by the middleware.
"""

from fastapi import APIRouter

router = APIRouter(tags=["Pages"], include_in_schema=False)


@router.get("/login")
def login_page():
    return {"page": "login"}


@router.get("/admin/dashboard")
def admin_dashboard():
    return {"page": "admin-dashboard"}


@router.get("/librarian/dashboard")
def librarian_dashboard():
    return {"page": "librarian-dashboard"}


@router.get("/patron/dashboard")
def patron_dashboard():
    return {"page": "patron-dashboard"}
