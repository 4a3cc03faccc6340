# archive_backend/models/auth.py

# This file defines Pydantic models for authentication and account
# requests (registration, login, password flows) and the session payload.

from typing import Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from .common import CamelModel
from .user import STAFF_ROLES, Role

PASSWORD_MIN_LENGTH = 8


def _check_length(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    return value


# --- Request Model for User Registration ---
class UserRegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str
    confirm_password: Optional[str] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_length(v)

    @field_validator("confirm_password")
    @classmethod
    def check_password_match(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is not None and "password" in info.data and v != info.data["password"]:
            raise ValueError("Passwords do not match")
        return v


class UserLoginRequest(CamelModel):
    """'email' also accepts a username."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: str = Field(..., min_length=1)


class ResetPasswordRequest(CamelModel):
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)

    @field_validator("confirm_password")
    @classmethod
    def check_match(cls, v: str, info: ValidationInfo) -> str:
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("Passwords do not match")
        return _check_length(v)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
    confirm_new_password: str = Field(..., min_length=1)

    @field_validator("confirm_new_password")
    @classmethod
    def check_match(cls, v: str, info: ValidationInfo) -> str:
        if "new_password" in info.data and v != info.data["new_password"]:
            raise ValueError("New passwords do not match")
        return _check_length(v)


class UpdateUsernameRequest(CamelModel):
    new_username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=1)

    @field_validator("new_username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class DeleteAccountRequest(CamelModel):
    password: str = Field(..., min_length=1)


class ContributeRequest(CamelModel):
    message: str

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Please enter a message")
        return v


class SessionData(CamelModel):
    """
    Payload carried in the signed session cookie.
    Includes the user's role, needed for route gating.
    """
    user_id: str
    username: str
    email: str
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def claims(self) -> dict:
        return self.model_dump(by_alias=True)
