# archive_backend/features/user/account/service.py

# Business logic for a signed-in user managing their own account:
# changing password, renaming, and deleting the account.

import re
from typing import Any, Dict

from ....db import mongo_client as database
from ....models.auth import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    SessionData,
    UpdateUsernameRequest,
)
from ....shared.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from ..auth.security import hash_password, verify_password


async def _load_user(session: SessionData) -> Dict[str, Any]:
    users_collection = await database.get_users_collection()
    object_id = database.to_object_id(session.user_id)
    user_document = await database.find_one(users_collection, {"_id": object_id}) if object_id else None
    if user_document is None:
        print(f"Account action for missing user {session.user_id}.")
        raise NotFoundError("User not found")
    return user_document


async def change_password(session: SessionData, request_data: ChangePasswordRequest) -> None:
    user_document = await _load_user(session)

    if not verify_password(request_data.current_password, user_document.get("password")):
        raise UnauthorizedError("Incorrect current password")
    if verify_password(request_data.new_password, user_document.get("password")):
        raise BadRequestError("New password must be different from the current password")

    users_collection = await database.get_users_collection()
    await database.update_one_by_id(
        users_collection,
        user_document["_id"],
        {"password": hash_password(request_data.new_password)},
    )
    print(f"Password changed for user {session.user_id}.")


async def update_username(session: SessionData, request_data: UpdateUsernameRequest) -> SessionData:
    """
    Renames the account and returns the refreshed session payload.
    Usernames are compared case-insensitively for availability.
    """
    user_document = await _load_user(session)

    if not verify_password(request_data.password, user_document.get("password")):
        raise UnauthorizedError("Incorrect password")

    new_username = request_data.new_username
    if new_username == user_document.get("username"):
        raise BadRequestError("New username is the same as the current one")

    users_collection = await database.get_users_collection()
    taken = await database.find_one(users_collection, {
        "username": {"$regex": f"^{re.escape(new_username)}$", "$options": "i"},
        "_id": {"$ne": user_document["_id"]},
    }, {"_id": 1})
    if taken:
        raise ConflictError("Username is already taken")

    await database.update_one_by_id(
        users_collection,
        user_document["_id"],
        {"username": new_username},
        conflict_message="Username is already taken",
    )
    print(f"Username updated for user {session.user_id}.")
    return session.model_copy(update={"username": new_username})


async def delete_account(session: SessionData, request_data: DeleteAccountRequest) -> None:
    user_document = await _load_user(session)

    if not verify_password(request_data.password, user_document.get("password")):
        raise UnauthorizedError("Incorrect password")

    users_collection = await database.get_users_collection()
    await database.delete_one_by_id(users_collection, user_document["_id"])
    print(f"Account deleted for user {session.user_id}.")
