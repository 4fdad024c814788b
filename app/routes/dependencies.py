"""
Shared FastAPI dependencies: services and the request session.

Tests swap implementations through app.dependency_overrides on the
provider functions below.
"""

from typing import Optional

from fastapi import Depends, Header

from app.core.exceptions import AuthenticationError, PermissionDeniedError
from app.models.user import Session
from app.services.auth_service import AuthService, get_auth_service
from app.services.report_store import ReportStore, get_report_store
from app.services.report_submission_service import (
    ReportSubmissionService,
    get_report_submission_service,
)
from app.services.user_service import UserService, get_user_service


def report_store() -> ReportStore:
    return get_report_store()


def submission_service() -> ReportSubmissionService:
    return get_report_submission_service()


def user_service() -> UserService:
    return get_user_service()


def auth_service() -> AuthService:
    return get_auth_service()


def get_session(
    authorization: Optional[str] = Header(None),
    auth: AuthService = Depends(auth_service),
) -> Session:
    """Resolve `Authorization: Bearer <token>` into a Session or fail with 401."""
    if not authorization:
        raise AuthenticationError("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Invalid auth scheme")
    return auth.resolve_session(token.strip())


def require_admin(session: Session = Depends(get_session)) -> Session:
    if not session.is_admin:
        raise PermissionDeniedError("Admin access required")
    return session
