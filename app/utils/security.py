"""
Security utilities: password hashing and signed tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.exceptions import AuthenticationError
from app.core.settings import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Token purposes, stored in the "purpose" claim so a verification link
# cannot be used as a session token and vice versa
ACCESS_TOKEN = "access"
EMAIL_VERIFICATION_TOKEN = "verify-email"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Not a hash passlib recognizes
        return False


def create_token(claims: Dict[str, Any], purpose: str, expires_minutes: Optional[int] = None) -> str:
    """Sign a JWT with JWT_SECRET; expires after JWT_EXPIRE_MINUTES by default."""
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "purpose": purpose,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, purpose: str) -> Dict[str, Any]:
    """
    Decode and check a JWT.

    Raises:
        AuthenticationError: bad signature, expired, or issued for another purpose
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected token: {e}")
        raise AuthenticationError()

    if payload.get("purpose") != purpose:
        raise AuthenticationError()
    return payload
