import logging
from typing import Optional
from fastapi import Request, Response
from hostelmart.config import Settings

logger = logging.getLogger(__name__)


class SessionCookieManager:
    """
    Stores, reads and clears the session token cookie.

    get() and clear() are best effort: a broken cookie header must never
    fail the request, so errors are logged and treated as "no session".
    """

    def __init__(
        self,
        name: str = "auth_token",
        max_age: int = 7 * 24 * 3600,
        secure: bool = False,
        samesite: str = "lax",
    ):
        self.name = name
        self.max_age = max_age
        self.secure = secure
        self.samesite = samesite

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionCookieManager":
        # secure=True enforces HTTPS only; local development runs over plain HTTP
        return cls(
            name=settings.cookie_name,
            max_age=settings.session_max_age,
            secure=settings.is_production,
            samesite=settings.cookie_samesite,
        )

    def set(self, response: Response, token: str) -> None:
        """
        Cookie attributes:
        - httponly: Prevents JavaScript access (XSS protection)
        - secure: HTTPS only, production only
        - samesite: Lax for CSRF protection while allowing normal navigation
        - max_age: same lifetime as the token itself
        - path: Cookie sent on all paths
        """
        response.set_cookie(
            key=self.name,
            value=token,
            httponly=True,
            secure=self.secure,
            samesite=self.samesite,
            max_age=self.max_age,
            path="/",
        )

    def get(self, request: Request) -> Optional[str]:
        try:
            return request.cookies.get(self.name) or None
        except Exception as e:
            logger.warning(f"Could not read session cookie: {e}")
            return None

    def clear(self, response: Response) -> None:
        try:
            response.delete_cookie(
                key=self.name,
                path="/",
                secure=self.secure,
                httponly=True,
                samesite=self.samesite,
            )
        except Exception as e:
            logger.warning(f"Could not clear session cookie: {e}")
