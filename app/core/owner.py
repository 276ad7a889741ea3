"""
Cart ownership
A cart belongs either to a registered user or to an anonymous guest session,
never both
"""

from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import Table, and_
from sqlalchemy.sql.elements import ColumnElement

@dataclass(frozen=True)
class UserOwner:
    user_id: int

@dataclass(frozen=True)
class GuestOwner:
    session_id: str

Owner = Union[UserOwner, GuestOwner]

def owner_from(user_id: Optional[int] = None, session_id: Optional[str] = None) -> Optional[Owner]:
    """Pick the owner for a request; a logged-in user always wins over the guest session"""
    if user_id:
        return UserOwner(user_id=user_id)
    if session_id:
        return GuestOwner(session_id=session_id)
    return None

def owner_filter(table: Table, owner: Owner) -> ColumnElement[bool]:
    """WHERE clause selecting the rows of `table` that belong to `owner`"""
    if isinstance(owner, UserOwner):
        return table.c.user_id == owner.user_id
    return and_(table.c.session_id == owner.session_id, table.c.user_id.is_(None))

def owner_columns(owner: Owner) -> dict:
    """Column values for a new row owned by `owner`"""
    if isinstance(owner, UserOwner):
        return {"user_id": owner.user_id, "session_id": None}
    return {"user_id": None, "session_id": owner.session_id}

def describe(owner: Optional[Owner]) -> str:
    if isinstance(owner, UserOwner):
        return f"user {owner.user_id}"
    if isinstance(owner, GuestOwner):
        return f"guest {owner.session_id[:8]}"
    return "anonymous"
