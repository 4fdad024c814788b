"""
User Service - Manage users in Firestore.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging

from app.config.firebase import get_db
from app.core.exceptions import StorageError
from app.core.settings import settings
from app.models.user import UserResponse, UserType
from app.utils.firestore_helpers import snapshot_to_dict, to_datetime, where_filter

logger = logging.getLogger(__name__)


class UserService:
    """
    Service for user management in Firestore.

    Returned dicts include the password hash; convert with to_response()
    before anything leaves the service layer.
    """

    def __init__(self, db=None, collection: Optional[str] = None):
        self._db = db
        self.collection = collection or settings.USERS_COLLECTION

    @property
    def db(self):
        if self._db is None:
            try:
                self._db = get_db()
            except RuntimeError as e:
                raise StorageError("Database unavailable. Please try again.", detail=str(e))
        return self._db

    def get_user_by_email(self, email: str) -> Optional[Dict]:
        query = where_filter(self.db.collection(self.collection), "email", "==", self._normalize_email(email)).limit(1)
        docs = self._stream(query)
        return docs[0] if docs else None

    def get_user_by_id(self, user_id: str) -> Optional[Dict]:
        try:
            doc = self.db.collection(self.collection).document(user_id).get()
        except Exception as e:
            logger.error(f"Failed to get user {user_id}: {e}")
            raise StorageError("Database unavailable. Please try again.", detail=str(e))
        return snapshot_to_dict(doc) if doc.exists else None

    def create_user(
        self,
        username: str,
        email: str,
        password_hash: str,
        user_type: UserType = UserType.USER,
        profile_photo: Optional[str] = None,
    ) -> Dict:
        """
        Create a new, unverified user.

        Returns:
            User dictionary including its Firestore ID
        """
        user_data = {
            "username": username,
            "email": self._normalize_email(email),
            "password": password_hash,
            "userType": user_type.value,
            "isVerified": False,
            "profilePhoto": profile_photo,
            "createdAt": datetime.now(timezone.utc),
        }
        try:
            user_ref = self.db.collection(self.collection).document()
            user_ref.set(user_data)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to create user: {e}", exc_info=True)
            raise StorageError("Could not create the account. Please try again.", detail=str(e))

        logger.info(f"User created: {user_ref.id}")
        return {**user_data, "id": user_ref.id}

    def mark_verified(self, user_id: str) -> None:
        try:
            self.db.collection(self.collection).document(user_id).update({"isVerified": True})
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to verify user {user_id}: {e}")
            raise StorageError("Could not verify the account. Please try again.", detail=str(e))
        logger.info(f"User verified: {user_id}")

    def list_users(self, user_type: Optional[UserType] = None) -> List[UserResponse]:
        query = self.db.collection(self.collection)
        if user_type is not None:
            query = where_filter(query, "userType", "==", user_type.value)
        return [self.to_response(data) for data in self._stream(query)]

    def count_users(self, user_type: Optional[UserType] = None) -> int:
        query = self.db.collection(self.collection)
        if user_type is not None:
            query = where_filter(query, "userType", "==", user_type.value)
        return len(self._stream(query))

    @staticmethod
    def to_response(user_data: Dict) -> UserResponse:
        created_at = user_data.get("createdAt")
        return UserResponse(
            id=user_data["id"],
            username=user_data.get("username"),
            email=user_data.get("email", ""),
            userType=user_data.get("userType") or UserType.USER,
            isVerified=user_data.get("isVerified", False),
            profilePhoto=user_data.get("profilePhoto"),
            createdAt=to_datetime(created_at) if created_at is not None else None,
        )

    def _stream(self, query) -> List[Dict]:
        try:
            return [snapshot_to_dict(doc) for doc in query.stream()]
        except Exception as e:
            logger.error(f"Failed to query users: {e}", exc_info=True)
            raise StorageError("Database unavailable. Please try again.", detail=str(e))

    def _normalize_email(self, email: str) -> str:
        """Normalize email address."""
        return (email or "").strip().lower()


# Global service instance (singleton pattern)
_user_service = None


def get_user_service() -> UserService:
    """
    Get or create UserService singleton instance.

    Returns:
        UserService: The global user service instance
    """
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
