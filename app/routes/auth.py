"""
Authentication endpoints - email + password with email verification.
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError
from app.models.report import describe_validation_error
from app.models.user import LoginRequest, UserCreate
from app.services.auth_service import AuthService
from app.services.media_storage import MediaFile
from app.routes.dependencies import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    username: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    userType: Optional[str] = Form(None),
    profilePhoto: Optional[UploadFile] = File(None),
    auth: AuthService = Depends(auth_service),
):
    """
    Register a new account with an optional profile photo.

    The account starts unverified; the verification link is issued by the
    auth service and must be opened before login succeeds.
    """
    try:
        request = UserCreate(
            username=username or "",
            email=email or "",
            password=password or "",
            userType=userType or "user",
        )
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_error(e))

    photo = None
    if profilePhoto is not None:
        photo = MediaFile(
            filename=profilePhoto.filename or "",
            content_type=profilePhoto.content_type or "",
            data=await profilePhoto.read(),
        )

    user, _ = await run_in_threadpool(auth.register, request, photo)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "message": "Registration successful! Please check your email to verify.",
            "user": user.to_wire(),
        },
    )


@router.get("/verify-email")
def verify_email(token: Optional[str] = Query(None), auth: AuthService = Depends(auth_service)):
    auth.verify_email(token)
    return {"message": "Email verified successfully!"}


@router.post("/login")
def login(request: LoginRequest, auth: AuthService = Depends(auth_service)):
    """
    Log in with email and password.

    Returns a bearer token valid for JWT_EXPIRE_MINUTES.
    """
    token, user = auth.login(request.email, request.password)
    return {"success": True, "token": token, "user": user.to_wire()}
