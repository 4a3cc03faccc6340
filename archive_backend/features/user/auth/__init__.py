# archive_backend/features/user/auth/__init__.py

# This file makes the 'auth' directory a Python package
# and exposes the pieces other features depend on.

from .dependencies import get_current_user, get_optional_user, require_staff
from .security import hash_password, verify_password, set_session_cookie, clear_session_cookie

__all__ = [
    "get_current_user",
    "get_optional_user",
    "require_staff",
    "hash_password",
    "verify_password",
    "set_session_cookie",
    "clear_session_cookie",
]
