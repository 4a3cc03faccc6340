# archive_backend/features/user/auth/security.py

# This file contains core security utilities for password hashing and
# session token (JWT) management.

import secrets
from datetime import timedelta
from typing import Optional, Dict, Any

from fastapi import Response
from passlib.context import CryptContext
from jose import jwt, JWTError

from ....config.settings import settings
from ....models.auth import SessionData
from ....shared.utils import utcnow

# --- Password Hashing Setup ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    """Hashes a plain text password using bcrypt (salted automatically)."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verifies a plain text password against a bcrypt hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def generate_token() -> str:
    """Random single-use token for verification and password-reset links."""
    return secrets.token_hex(32)


# --- JWT Session Token Functions ---
def create_session_token(session: SessionData, expires_delta: Optional[timedelta] = None) -> str:
    """
    Creates a signed JWT carrying {userId, username, email, role}.
    Expires after SESSION_EXPIRE_HOURS unless expires_delta is given.
    """
    now = utcnow()
    expire = now + (expires_delta or timedelta(hours=settings.SESSION_EXPIRE_HOURS))
    to_encode: Dict[str, Any] = session.claims()
    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_session_token(token: Optional[str]) -> Optional[SessionData]:
    """
    Verifies a session JWT and returns its payload if valid.
    Returns None for a missing, tampered, expired or malformed token.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    try:
        return SessionData.model_validate(payload)
    except ValueError:
        return None


def set_session_cookie(response: Response, session: SessionData) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_token(session),
        max_age=settings.SESSION_EXPIRE_HOURS * 3600,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
