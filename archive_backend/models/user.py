# archive_backend/models/user.py

# This file defines the Pydantic model for the User document
# stored in the MongoDB 'users' collection.

import datetime
from typing import Literal, Optional

from pydantic import Field

from .common import CamelModel, PyObjectId
from ..shared.utils import utcnow

ROLES = ("admin", "supervisor", "user")
STAFF_ROLES = ("admin", "supervisor")

Role = Literal["admin", "supervisor", "user"]


class User(CamelModel):
    """
    Represents a user document in the MongoDB 'users' collection.
    The verification token is valid for a fixed window measured from created_at,
    which is refreshed whenever the token is reissued.
    """
    id: Optional[PyObjectId] = Field(alias="_id", default=None)

    username: str
    email: str
    password: str  # bcrypt hash, never plaintext
    role: Role = "user"
    is_verified: bool = False
    verification_token: Optional[str] = None
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[datetime.datetime] = None
    created_at: datetime.datetime = Field(default_factory=utcnow)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"id"})
