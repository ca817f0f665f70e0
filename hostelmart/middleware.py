"""
Route gate.

Runs before any handler and redirects based on where the request is going
and whether it carries a valid session:

- protected paths without a valid session go to the login page, with the
  original path as callbackUrl
- login/register pages with a valid session go home
- everything else passes through untouched

The gate verifies the token signature and expiry, not just cookie
presence. It fails open: if anything goes wrong here the request is let
through, and route handlers enforce authentication themselves through
get_current_user.
"""

import logging
from enum import Enum
from typing import Callable, Iterable, Optional, Tuple
from urllib.parse import urlencode
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from hostelmart.auth import TokenService
from hostelmart.cookies import SessionCookieManager

logger = logging.getLogger(__name__)

# Paths that require authentication
PROTECTED_PATHS: Tuple[str, ...] = ("/settings", "/products/sell", "/api/products", "/api/user")

# Paths that are accessible only for non-authenticated users
AUTH_PATHS: Tuple[str, ...] = ("/auth",)

LOGIN_PATH = "/auth"
HOME_PATH = "/"


class PathClass(str, Enum):
    PROTECTED = "protected"
    AUTH_ONLY = "auth-only"
    PUBLIC = "public"


def _matches(path: str, prefixes: Iterable[str]) -> bool:
    return any(path == prefix or path.startswith(f"{prefix}/") for prefix in prefixes)


class RouteGate:
    def __init__(
        self,
        token_service: TokenService,
        cookies: SessionCookieManager,
        protected_paths: Iterable[str] = PROTECTED_PATHS,
        auth_paths: Iterable[str] = AUTH_PATHS,
    ):
        self.token_service = token_service
        self.cookies = cookies
        self.protected_paths = tuple(protected_paths)
        self.auth_paths = tuple(auth_paths)

    def classify(self, path: str) -> PathClass:
        if _matches(path, self.protected_paths):
            return PathClass.PROTECTED
        if _matches(path, self.auth_paths):
            return PathClass.AUTH_ONLY
        return PathClass.PUBLIC

    def is_authenticated(self, request: Request) -> bool:
        token = self.cookies.get(request)
        if not token:
            return False
        return self.token_service.verify(token) is not None

    def redirect_for(self, request: Request) -> Optional[str]:
        """Where to send this request, or None to let it through."""
        path = request.url.path
        path_class = self.classify(path)
        if path_class is PathClass.PUBLIC:
            return None

        authenticated = self.is_authenticated(request)
        if path_class is PathClass.PROTECTED and not authenticated:
            return f"{LOGIN_PATH}?{urlencode({'callbackUrl': path})}"
        if path_class is PathClass.AUTH_ONLY and authenticated:
            return HOME_PATH
        return None


class RouteGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, gate: RouteGate):
        super().__init__(app)
        self.gate = gate

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            location = self.gate.redirect_for(request)
        except Exception as e:
            logger.error(f"Route gate error on {request.url.path}, allowing request: {e}", exc_info=True)
            location = None

        if location is not None:
            logger.debug(f"Gate redirect {request.url.path} -> {location}")
            return RedirectResponse(url=location)

        return await call_next(request)
