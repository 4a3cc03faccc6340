# archive_backend/shared/errors.py

# Application error taxonomy. Every handler raises one of these (or lets an
# unexpected exception fall through to the generic 500 handler in api/main.py).

from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    """HTTPException carrying a machine-readable error code."""

    code: str = "INTERNAL"
    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_default: str = "An internal server error occurred."

    def __init__(self, detail: Optional[str] = None, code: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=self.status_code_default,
            detail=detail or self.message_default,
            headers=headers,
        )
        if code:
            self.code = code


class UnauthorizedError(AppError):
    code = "UNAUTHORIZED"
    status_code_default = status.HTTP_401_UNAUTHORIZED
    message_default = "Please log in"


class ForbiddenError(AppError):
    code = "FORBIDDEN"
    status_code_default = status.HTTP_403_FORBIDDEN
    message_default = "Not authorized"


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code_default = status.HTTP_404_NOT_FOUND
    message_default = "Not found"


class ConflictError(AppError):
    code = "CONFLICT"
    status_code_default = status.HTTP_409_CONFLICT
    message_default = "Resource already exists"


class BadRequestError(AppError):
    code = "VALIDATION"
    status_code_default = status.HTTP_400_BAD_REQUEST
    message_default = "Invalid request"


def format_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """
    Turns pydantic error dicts into one readable sentence per problem.
    Custom validator messages are shown as written; others are prefixed with the field.
    """
    messages = []
    for error in errors:
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            messages.append(message[len("Value error, "):])
            continue
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        messages.append(f"{location[-1]}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"
