"""
User endpoints - profile and admin dashboard user listings.

Listings expose every account's email, so they need an admin session.
"""

from fastapi import APIRouter, Depends

from app.models.user import Session, UserType
from app.services.auth_service import AuthService
from app.services.user_service import UserService
from app.routes.dependencies import auth_service, get_session, require_admin, user_service

router = APIRouter(prefix="/user", tags=["Users"])


@router.get("/profile")
def get_profile(
    session: Session = Depends(get_session),
    auth: AuthService = Depends(auth_service),
):
    """Profile of the authenticated user."""
    user = auth.get_profile(session)
    return {"success": True, "user": user.to_wire()}


@router.get("/getAll")
def get_all_users(
    _: Session = Depends(require_admin),
    users: UserService = Depends(user_service),
):
    return {"success": True, "users": [user.to_wire() for user in users.list_users()]}


@router.get("/countUsersOnly")
def count_users_only(
    _: Session = Depends(require_admin),
    users: UserService = Depends(user_service),
):
    return {"success": True, "count": users.count_users(UserType.USER)}


@router.get("/getAllUsersOnly")
def get_all_users_only(
    _: Session = Depends(require_admin),
    users: UserService = Depends(user_service),
):
    return {"success": True, "users": [user.to_wire() for user in users.list_users(UserType.USER)]}
