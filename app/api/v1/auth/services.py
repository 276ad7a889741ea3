"""
Authentication service layer
Handles registration, password login and the guest cart hand-over
"""

from typing import Optional
import logging

from sqlalchemy import select, insert, update, func

from app.models import User
from app.core.security import SecurityUtils
from app.core.store import DataStore
from app.core.exceptions import (
    BadRequestException,
    UnauthorizedException,
    ConflictException,
    NotFoundException,
)
from app.schemas.cart import MergeResult
from app.services.cart_service import CartService
from app.utils.validators import validate_email_address
from .schemas import RegisterRequest, ProfileUpdateRequest, UserResponse

logger = logging.getLogger(__name__)

users = User.__table__

_USER_COLUMNS = (
    users.c.id,
    users.c.email,
    users.c.full_name,
    users.c.phone,
    users.c.address,
    users.c.last_login,
    users.c.created_at,
)

class AuthService:
    """Authentication service"""

    def __init__(self, store: DataStore):
        self.store = store
        self.cart_service = CartService(store)

    async def register(self, data: RegisterRequest) -> UserResponse:
        """
        Register a new user

        Raises:
            BadRequestException: Invalid email or weak password
            ConflictException: Email already registered
        """
        try:
            email = validate_email_address(data.email)
        except ValueError:
            raise BadRequestException("Invalid email address", error_code="INVALID_EMAIL")

        is_valid, message = SecurityUtils.validate_password(data.password)
        if not is_valid:
            raise BadRequestException(message, error_code="WEAK_PASSWORD")

        async with self.store.transaction():
            existing = await self.store.get(select(users.c.id).where(users.c.email == email))
            if existing is not None:
                raise ConflictException("Email already registered", error_code="EMAIL_EXISTS")

            created = await self.store.run(
                insert(users).values(
                    email=email,
                    password_hash=SecurityUtils.hash_password(data.password),
                    full_name=data.full_name,
                    phone=data.phone,
                    address=data.address,
                    is_active=True,
                )
            )
            user = await self.store.get(select(*_USER_COLUMNS).where(users.c.id == created.last_insert_id))

        logger.info(f"New user registered: {user['id']}")
        return UserResponse(**dict(user))

    async def authenticate(self, email: str, password: str) -> UserResponse:
        """Check credentials and stamp last_login"""
        email = (email or "").strip().lower()

        async with self.store.transaction():
            user = await self.store.get(
                select(users.c.id, users.c.password_hash)
                .where(func.lower(users.c.email) == email, users.c.is_active.is_(True))
            )
            if user is None or not SecurityUtils.verify_password(password, user["password_hash"]):
                raise UnauthorizedException("Invalid email or password", error_code="INVALID_CREDENTIALS")

            await self.store.run(
                update(users).where(users.c.id == user["id"]).values(last_login=func.now())
            )
            row = await self.store.get(select(*_USER_COLUMNS).where(users.c.id == user["id"]))

        logger.info(f"User {user['id']} logged in")
        return UserResponse(**dict(row))

    async def merge_guest_cart(self, guest_session_id: Optional[str], user_id: int) -> MergeResult:
        """Hand the guest cart to the user; never raises so login always succeeds"""
        if not guest_session_id:
            return MergeResult()
        try:
            return await self.cart_service.merge_guest_cart(guest_session_id, user_id)
        except Exception:
            logger.exception(f"Guest cart merge failed for user {user_id}")
            return MergeResult()

    async def get_user(self, user_id: int) -> UserResponse:
        async with self.store.transaction():
            user = await self.store.get(
                select(*_USER_COLUMNS).where(users.c.id == user_id, users.c.is_active.is_(True))
            )
        if user is None:
            raise NotFoundException("User not found", error_code="USER_NOT_FOUND")
        return UserResponse(**dict(user))

    async def update_profile(self, user_id: int, data: ProfileUpdateRequest) -> UserResponse:
        values = data.model_dump(exclude_none=True)
        if values:
            async with self.store.transaction():
                await self.store.run(update(users).where(users.c.id == user_id).values(**values))
        return await self.get_user(user_id)

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        is_valid, message = SecurityUtils.validate_password(new_password)
        if not is_valid:
            raise BadRequestException(message, error_code="WEAK_PASSWORD")

        async with self.store.transaction():
            user = await self.store.get(select(users.c.password_hash).where(users.c.id == user_id))
            if user is None:
                raise NotFoundException("User not found", error_code="USER_NOT_FOUND")
            if not SecurityUtils.verify_password(current_password, user["password_hash"]):
                raise BadRequestException("Current password is incorrect", error_code="INVALID_PASSWORD")

            await self.store.run(
                update(users)
                .where(users.c.id == user_id)
                .values(password_hash=SecurityUtils.hash_password(new_password))
            )

        logger.info(f"Password changed for user {user_id}")
