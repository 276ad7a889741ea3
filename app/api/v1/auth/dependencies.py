"""
Authentication dependencies and utilities
Resolve who owns the cart for the current request
"""

from typing import Optional
from fastapi import Request

from app.core.exceptions import UnauthorizedException
from app.core.owner import Owner, owner_from
from app.core.security import get_session_user_id, get_guest_session_id

def resolve_owner(request: Request) -> Optional[Owner]:
    """
    Cart owner for this request
    A logged-in user wins over the guest session; None when the caller has neither
    """
    return owner_from(
        user_id=get_session_user_id(request),
        session_id=get_guest_session_id(request),
    )

def get_current_user_id_optional(request: Request) -> Optional[int]:
    return get_session_user_id(request)

def require_user(request: Request) -> int:
    """
    Id of the logged-in user (required)
    Raises 401 if the session carries no user
    """
    user_id = get_session_user_id(request)
    if not user_id:
        raise UnauthorizedException()
    return user_id
