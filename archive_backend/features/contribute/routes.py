# archive_backend/features/contribute/routes.py

# Lets a signed-in user send a contribution message to the archive team by email.

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...models.auth import ContributeRequest, SessionData
from ...shared import email as mailer
from ...shared.errors import AppError
from ..user.auth.dependencies import get_current_user

router = APIRouter(
    prefix="/api",
    tags=["contribute"]
)


@router.post("/contribute")
async def contribute(
    request_data: ContributeRequest,
    session: SessionData = Depends(get_current_user),
) -> Dict[str, Any]:
    receiver = mailer.contribution_receiver()
    subject, body = mailer.contribution_email(session.username, session.email, request_data.message)
    if not receiver:
        print("Contribution rejected: no CONTRIBUTE_RECEIVER_EMAIL or EMAIL_USER configured.")
        raise AppError("Failed to send message. Please try again later.")
    try:
        await mailer.send_mail(receiver, subject, body)
    except Exception as e:
        print(f"Contribution email from user {session.user_id} failed: {e}")
        raise AppError("Failed to send message. Please try again later.")

    print(f"Contribution message sent for user {session.user_id}.")
    return {"success": True, "message": "Message sent successfully"}
