# archive_backend/features/user/auth/service.py

# This file contains the core business logic for the account lifecycle:
# registration with email verification, login, and password reset.
# Route handlers stay thin and call into these functions.

import traceback
from datetime import timedelta
from typing import Any, Dict, Optional

from ....config.settings import settings
from ....db import mongo_client as database
from ....models.auth import (
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SessionData,
    UserLoginRequest,
    UserRegisterRequest,
)
from ....models.user import User
from ....shared import email as mailer
from ....shared.errors import (
    AppError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from ....shared.utils import as_utc, utcnow
from .security import generate_token, hash_password, verify_password

FORGOT_PASSWORD_MESSAGE = "If that email exists, a password reset link has been sent."


def session_for(user_document: Dict[str, Any]) -> SessionData:
    return SessionData(
        user_id=str(user_document["_id"]),
        username=user_document["username"],
        email=user_document["email"],
        role=user_document.get("role", "user"),
    )


# --- Registration ---

async def register_user(request_data: UserRegisterRequest) -> str:
    """
    Creates an unverified account and emails a verification link.
    Returns the user-facing success message.

    A collision with an unverified account reissues its token (and restarts
    the validity window); a collision with a verified account is rejected.
    """
    users_collection = await database.get_users_collection()

    existing_user = await database.find_one(users_collection, {
        "$or": [
            {"email": request_data.email},
            {"username": request_data.username},
        ]
    })

    if existing_user:
        if not existing_user.get("isVerified"):
            token = generate_token()
            await database.update_one_by_id(
                users_collection,
                existing_user["_id"],
                {"verificationToken": token, "createdAt": utcnow()},
            )
            subject, body = mailer.verification_email(token, reissued=True)
            try:
                await mailer.send_mail(existing_user["email"], subject, body)
            except Exception as e:
                print(f"Failed to resend verification email for user {existing_user['_id']}: {e}")
                raise AppError("Failed to send verification email. Please check your email and try again.")
            print(f"Reissued verification token for unverified user {existing_user['_id']}.")
            raise ConflictError(
                "An unverified account with this email/username already exists. "
                "A new verification link has been sent."
            )
        print(f"Registration rejected: verified account exists for {request_data.email} / {request_data.username}.")
        raise ConflictError("Email or Username is already registered. Please Login.")

    token = generate_token()
    new_user = User(
        username=request_data.username,
        email=request_data.email,
        password=hash_password(request_data.password),
        is_verified=False,
        verification_token=token,
    )

    new_user_id = await database.insert_one(
        users_collection,
        new_user.to_document(),
        conflict_message="Email or Username is already registered. Please Login.",
    )
    print(f"New user inserted successfully with ID: {new_user_id}")

    subject, body = mailer.verification_email(token)
    try:
        await mailer.send_mail(request_data.email, subject, body)
    except Exception as e:
        # Roll back so the person can register again with the same details
        print(f"Verification email failed for new user {new_user_id}, removing account: {e}")
        await database.delete_one_by_id(users_collection, new_user_id)
        raise AppError("Failed to send verification email. Please check your email and try again.")

    return (
        f"Registration successful! We have sent a verification email to {request_data.email}. "
        "Please check your inbox."
    )


async def verify_email(token: str) -> None:
    """
    Redeems a verification token. The token is valid for
    VERIFICATION_TOKEN_EXPIRE_MINUTES after the account's createdAt and is
    cleared on success, so it works exactly once.
    """
    users_collection = await database.get_users_collection()
    user_document = await database.find_one(users_collection, {"verificationToken": token})

    if user_document is None:
        print("Verification attempted with an unknown or already used token.")
        raise NotFoundError("Invalid or expired verification link.")

    created_at = as_utc(user_document.get("createdAt"))
    window = timedelta(minutes=settings.VERIFICATION_TOKEN_EXPIRE_MINUTES)
    if created_at is None or utcnow() - created_at > window:
        print(f"Verification link expired for user {user_document['_id']}.")
        raise BadRequestError("Verification link expired. Please register again.")

    await database.update_one_by_id(
        users_collection,
        user_document["_id"],
        {"isVerified": True},
        unset_fields=["verificationToken"],
    )
    print(f"Email verified for user {user_document['_id']}.")


# --- Login ---

async def authenticate_user(request_data: UserLoginRequest) -> SessionData:
    """Checks credentials and returns the session payload for the cookie."""
    users_collection = await database.get_users_collection()
    identifier = request_data.email.strip()

    user_document = await database.find_one(users_collection, {
        "$or": [
            {"email": identifier.lower()},
            {"username": identifier},
        ]
    })

    if not user_document or not verify_password(request_data.password, user_document.get("password")):
        print(f"Login failed for {identifier}.")
        raise UnauthorizedError("Invalid email or password")

    if not user_document.get("isVerified"):
        print(f"Login blocked for unverified user {user_document['_id']}.")
        raise ForbiddenError("Please verify your email before logging in.", code="NOT_VERIFIED")

    print(f"Authentication successful for user: {user_document.get('username')}")
    return session_for(user_document)


# --- Password Reset ---

async def request_password_reset(request_data: ForgotPasswordRequest) -> str:
    """
    Issues a reset token and emails the link. The reply is identical whether
    or not the email is registered, and mail failures are not surfaced.
    """
    users_collection = await database.get_users_collection()
    email = request_data.email.strip().lower()
    user_document = await database.find_one(users_collection, {"email": email})

    if user_document is None:
        print("Password reset requested for an unregistered email.")
        return FORGOT_PASSWORD_MESSAGE

    reset_token = generate_token()
    expires_at = utcnow() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES)
    await database.update_one_by_id(
        users_collection,
        user_document["_id"],
        {"passwordResetToken": reset_token, "passwordResetExpires": expires_at},
    )

    subject, body = mailer.password_reset_email(reset_token)
    try:
        await mailer.send_mail(user_document["email"], subject, body)
        print(f"Password reset email sent for user {user_document['_id']}.")
    except Exception as e:
        print(f"Password reset email failed for user {user_document['_id']}: {e}")
        traceback.print_exc()

    return FORGOT_PASSWORD_MESSAGE


async def reset_password(token: str, request_data: ResetPasswordRequest) -> None:
    """Redeems a reset token before its explicit expiry and stores the new hash."""
    users_collection = await database.get_users_collection()
    user_document = await database.find_one(users_collection, {"passwordResetToken": token})

    expires_at = as_utc(user_document.get("passwordResetExpires")) if user_document else None
    if expires_at is None or expires_at <= utcnow():
        raise BadRequestError("Password reset token is invalid or has expired")

    await database.update_one_by_id(
        users_collection,
        user_document["_id"],
        {"password": hash_password(request_data.password)},
        unset_fields=["passwordResetToken", "passwordResetExpires"],
    )
    print(f"Password reset successful for user {user_document['_id']}.")


async def find_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    object_id = database.to_object_id(user_id)
    if object_id is None:
        return None
    users_collection = await database.get_users_collection()
    return await database.find_one(users_collection, {"_id": object_id})
