# archive_backend/features/user/auth/routes.py

# This file defines FastAPI API endpoints for user authentication:
# registration, email verification, login/logout, session lookup and
# password reset. Business logic lives in service.py.

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status

from ....models.auth import (
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SessionData,
    UserLoginRequest,
    UserRegisterRequest,
)
from . import service as auth_service
from .dependencies import get_optional_user
from .security import clear_session_cookie, set_session_cookie


# --- Define API Router for this feature ---
router = APIRouter(
    prefix="/api/auth",
    tags=["auth"]
)


# --- Endpoint to Handle User Registration (/api/auth/register) ---
@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(request_data: UserRegisterRequest) -> Dict[str, Any]:
    """
    Registers a new unverified user and emails a verification link.
    """
    print(f"Registration request received for username: {request_data.username}")
    message = await auth_service.register_user(request_data)
    return {"success": True, "message": message}


# --- Endpoint to Verify Email (/api/auth/verify/{token}) ---
@router.get("/verify/{token}")
async def verify_email(token: str) -> Dict[str, Any]:
    await auth_service.verify_email(token)
    return {"success": True, "message": "Email verified successfully. You can now log in."}


# --- Endpoint to Handle User Login (/api/auth/login) ---
@router.post("/login")
async def login_user(request_data: UserLoginRequest, response: Response) -> Dict[str, Any]:
    """
    Authenticates with email (or username) and password and sets the
    HTTP-only session cookie.
    """
    session = await auth_service.authenticate_user(request_data)
    set_session_cookie(response, session)
    return {"success": True, "user": {"username": session.username, "role": session.role}}


@router.post("/logout")
async def logout_user(response: Response) -> Dict[str, Any]:
    clear_session_cookie(response)
    return {"success": True}


@router.get("/session")
async def read_session(session: Optional[SessionData] = Depends(get_optional_user)) -> Dict[str, Any]:
    """Current session payload, or {"user": null} for anonymous visitors."""
    return {"user": session.claims() if session else None}


# --- Password Reset Endpoints ---
@router.post("/forgot-password")
async def forgot_password(request_data: ForgotPasswordRequest) -> Dict[str, Any]:
    message = await auth_service.request_password_reset(request_data)
    return {"success": True, "message": message}


@router.post("/reset-password/{token}")
async def reset_password(token: str, request_data: ResetPasswordRequest) -> Dict[str, Any]:
    await auth_service.reset_password(token, request_data)
    return {"success": True, "message": "Password has been reset. You can now log in."}
