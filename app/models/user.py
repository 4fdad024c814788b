"""
User models for authentication and user management.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class UserType(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserCreate(BaseModel):
    """Model for registering a new user."""
    username: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)
    userType: UserType = Field(default=UserType.USER)


class LoginRequest(BaseModel):
    """Request to log in. Both fields are optional here so the route can
    answer with the client's expected message instead of a 422."""
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """Model for user responses. Never includes the password hash."""
    id: str = Field(..., description="Firestore document ID")
    username: Optional[str] = None
    email: str
    userType: UserType = UserType.USER
    isVerified: bool = False
    profilePhoto: Optional[str] = None
    createdAt: Optional[datetime] = None

    def to_wire(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        data["_id"] = self.id
        return data


@dataclass(frozen=True)
class Session:
    """
    The authenticated caller of one request, resolved from the bearer token.
    Handlers receive it explicitly through a dependency.
    """
    user_id: str
    user_type: UserType
    token: str

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN
