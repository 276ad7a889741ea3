"""Session-based authentication: register, login, guest cart hand-over"""

from .dependencies import resolve_owner, require_user
from .services import AuthService

__all__ = ["resolve_owner", "require_user", "AuthService"]
