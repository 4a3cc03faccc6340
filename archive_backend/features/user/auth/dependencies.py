# archive_backend/features/user/auth/dependencies.py

# This file contains FastAPI dependency functions for authentication and authorization.
# API handlers re-validate the session themselves; the page gate in gate.py
# only decides redirects.

from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyCookie

from .security import verify_session_token
from ....config.settings import settings
from ....models.auth import SessionData
from ....shared.errors import ForbiddenError, UnauthorizedError


# --- Cookie scheme ---
# Reads the HTTP-only session cookie and shows up in the OpenAPI docs.
session_cookie_scheme = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)


async def get_optional_user(token: Optional[str] = Depends(session_cookie_scheme)) -> Optional[SessionData]:
    """Returns the session payload, or None for anonymous visitors."""
    return verify_session_token(token)


async def get_current_user(session: Optional[SessionData] = Depends(get_optional_user)) -> SessionData:
    """
    FastAPI dependency for endpoints that require a signed-in user.

    Raises:
        UnauthorizedError: If the cookie is missing, invalid or expired.
    """
    if session is None:
        raise UnauthorizedError()
    return session


async def require_staff(session: SessionData = Depends(get_current_user)) -> SessionData:
    """Only admin and supervisor roles may manage archive content."""
    if not session.is_staff:
        print(f"Forbidden: user {session.user_id} with role '{session.role}' attempted a staff action.")
        raise ForbiddenError()
    return session
