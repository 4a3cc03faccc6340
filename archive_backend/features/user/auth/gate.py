# archive_backend/features/user/auth/gate.py

# Routing gate for page requests. Decides redirects from the session cookie
# before a page is served. API routes are not gated here; each API handler
# checks the session itself through the dependencies in dependencies.py.

from typing import Optional
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ....config.settings import settings
from ....models.user import STAFF_ROLES
from .security import verify_session_token

AUTH_PAGES = ("/login", "/register")
PROTECTED_PAGES = ("/profile", "/contribute")
ADMIN_PREFIX = "/admin"


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def gate_redirect(path: str, role: Optional[str]) -> Optional[str]:
    """
    Returns the redirect target for a page path, or None to let it through.
    'role' is None for anonymous visitors.
    """
    if path.startswith("/api"):
        return None

    if any(_matches(path, page) for page in AUTH_PAGES):
        return "/" if role else None

    if any(_matches(path, page) for page in PROTECTED_PAGES) or _matches(path, ADMIN_PREFIX):
        if role is None:
            return f"/login?redirect={quote(path, safe='/')}"
        if _matches(path, ADMIN_PREFIX) and role not in STAFF_ROLES:
            return "/"

    return None


class SessionGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        session = verify_session_token(request.cookies.get(settings.SESSION_COOKIE_NAME))
        target = gate_redirect(request.url.path, session.role if session else None)
        if target is not None:
            print(f"Gate redirect: {request.url.path} -> {target}")
            return RedirectResponse(url=target, status_code=307)
        return await call_next(request)
