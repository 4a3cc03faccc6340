# archive_backend/features/user/account/routes.py

# API endpoints for the signed-in user's own account (profile page actions).

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from ....models.auth import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    SessionData,
    UpdateUsernameRequest,
)
from ..auth.dependencies import get_current_user
from ..auth.security import clear_session_cookie, set_session_cookie
from . import service as account_service


router = APIRouter(
    prefix="/api/user",
    tags=["user"]
)


@router.post("/change-password")
async def change_password(
    request_data: ChangePasswordRequest,
    session: SessionData = Depends(get_current_user),
) -> Dict[str, Any]:
    await account_service.change_password(session, request_data)
    return {"success": True, "message": "Password updated successfully"}


@router.post("/update-username")
async def update_username(
    request_data: UpdateUsernameRequest,
    response: Response,
    session: SessionData = Depends(get_current_user),
) -> Dict[str, Any]:
    """Renames the account and reissues the session cookie with the new name."""
    refreshed = await account_service.update_username(session, request_data)
    set_session_cookie(response, refreshed)
    return {"success": True, "message": "Username updated successfully", "username": refreshed.username}


@router.post("/delete-account")
async def delete_account(
    request_data: DeleteAccountRequest,
    response: Response,
    session: SessionData = Depends(get_current_user),
) -> Dict[str, Any]:
    await account_service.delete_account(session, request_data)
    clear_session_cookie(response)
    return {"success": True, "message": "Account deleted"}
