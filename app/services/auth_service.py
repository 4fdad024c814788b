"""
Auth Service - registration, email verification, login and sessions.

Email delivery is not wired up: the verification link is written to the
log so an operator (or a developer) can open it.
"""

from typing import Optional, Tuple
import logging

from app.core.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)
from app.core.settings import settings
from app.models.user import Session, UserCreate, UserResponse, UserType
from app.services.media_storage import MediaFile, MediaStorage, get_media_storage
from app.services.user_service import UserService, get_user_service
from app.utils.security import (
    ACCESS_TOKEN,
    EMAIL_VERIFICATION_TOKEN,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

PROFILE_PHOTO_FOLDER = "user-profiles"
PROFILE_PHOTO_TYPES = {"image/jpeg", "image/jpg", "image/png"}


class AuthService:
    """
    Service for account lifecycle and bearer-token sessions.
    """

    def __init__(self, users: Optional[UserService] = None, media_storage: Optional[MediaStorage] = None):
        self.users = users or get_user_service()
        self._media_storage = media_storage

    @property
    def media_storage(self) -> MediaStorage:
        if self._media_storage is None:
            self._media_storage = get_media_storage()
        return self._media_storage

    def register(self, request: UserCreate, profile_photo: Optional[MediaFile] = None) -> Tuple[UserResponse, str]:
        """
        Register a new unverified user.

        Returns:
            (user, verification_link)

        Raises:
            ValidationError: email already registered, or the photo is not a JPEG/PNG
        """
        if self.users.get_user_by_email(request.email):
            raise ValidationError("User already exists")

        photo_url = None
        if profile_photo is not None and profile_photo.size > 0:
            if profile_photo.content_type not in PROFILE_PHOTO_TYPES:
                raise ValidationError("Profile photo must be a JPEG or PNG image")
            photo_url = self.media_storage.upload(profile_photo, PROFILE_PHOTO_FOLDER)

        try:
            user_data = self.users.create_user(
                username=request.username,
                email=request.email,
                password_hash=hash_password(request.password),
                user_type=request.userType,
                profile_photo=photo_url,
            )
        except StorageError:
            if photo_url:
                self.media_storage.delete(photo_url)
            raise

        verification_token = create_token({"email": user_data["email"]}, EMAIL_VERIFICATION_TOKEN)
        link = f"{settings.EMAIL_VERIFY_BASE_URL}?token={verification_token}"
        self._send_verification_email(user_data, link)

        return UserService.to_response(user_data), link

    def verify_email(self, token: Optional[str]) -> UserResponse:
        """
        Mark the account named in a verification token as verified.

        Raises:
            ValidationError: missing/invalid token, unknown user, already verified
        """
        if not token:
            raise ValidationError("Invalid token")
        try:
            payload = decode_token(token, EMAIL_VERIFICATION_TOKEN)
        except AuthenticationError:
            raise ValidationError("Invalid or expired token")

        user_data = self.users.get_user_by_email(payload.get("email", ""))
        if not user_data:
            raise ValidationError("User not found")
        if user_data.get("isVerified"):
            raise ValidationError("Already verified")

        self.users.mark_verified(user_data["id"])
        user_data["isVerified"] = True
        return UserService.to_response(user_data)

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[str, UserResponse]:
        """
        Check credentials and issue an access token.

        Raises:
            ValidationError: missing fields or bad credentials
            PermissionDeniedError: the email has not been verified yet
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        user_data = self.users.get_user_by_email(email)
        if not user_data or not verify_password(password, user_data.get("password")):
            raise ValidationError("Invalid credentials")
        if not user_data.get("isVerified"):
            raise PermissionDeniedError("Please verify your email before logging in.")

        user = UserService.to_response(user_data)
        token = create_token({"id": user.id, "userType": user.userType.value}, ACCESS_TOKEN)
        logger.info(f"User logged in: {user.id}")
        return token, user

    def resolve_session(self, token: Optional[str]) -> Session:
        """
        Raises:
            AuthenticationError: missing, invalid or expired token
        """
        if not token:
            raise AuthenticationError("Missing Authorization header")
        payload = decode_token(token, ACCESS_TOKEN)
        try:
            user_type = UserType(payload.get("userType", UserType.USER.value))
        except ValueError:
            raise AuthenticationError()
        if not payload.get("id"):
            raise AuthenticationError()
        return Session(user_id=payload["id"], user_type=user_type, token=token)

    def get_profile(self, session: Session) -> UserResponse:
        """
        Raises:
            NotFoundError: the account was removed after the token was issued
        """
        user_data = self.users.get_user_by_id(session.user_id)
        if not user_data:
            raise NotFoundError("User not found")
        return UserService.to_response(user_data)

    def _send_verification_email(self, user_data: dict, link: str) -> None:
        # TODO: hand the link to an SMTP/email provider once one is chosen
        logger.info(
            f"Verification link for {user_data['email']} (user {user_data['id']}): {link}"
        )


# Global service instance (singleton pattern)
_auth_service = None


def get_auth_service() -> AuthService:
    """
    Get or create AuthService singleton instance.
    """
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
