"""
Security utilities for authentication
Handles password hashing and session bookkeeping
"""

from typing import Optional
import uuid

from fastapi import Request
from passlib.context import CryptContext

from .config import settings

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Keys stored in the signed session cookie
SESSION_USER_KEY = "user_id"
SESSION_EMAIL_KEY = "email"
SESSION_GUEST_KEY = "guest_session_id"

class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash password using bcrypt"""
        return pwd_context.hash(password)

    @staticmethod
    def validate_password(password: str) -> tuple[bool, str]:
        """
        Validate password strength
        Returns (is_valid, error_message)
        """
        if not password or len(password) < settings.PASSWORD_MIN_LENGTH:
            return False, f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"
        return True, ""

    @staticmethod
    def generate_session_id() -> str:
        """Opaque id for an anonymous shopper"""
        return uuid.uuid4().hex

def get_session_user_id(request: Request) -> Optional[int]:
    return request.session.get(SESSION_USER_KEY)

def get_guest_session_id(request: Request) -> Optional[str]:
    return request.session.get(SESSION_GUEST_KEY)

def ensure_guest_session(request: Request) -> str:
    """Return the guest session id, minting one on first use"""
    session_id = request.session.get(SESSION_GUEST_KEY)
    if not session_id:
        session_id = SecurityUtils.generate_session_id()
        request.session[SESSION_GUEST_KEY] = session_id
    return session_id
