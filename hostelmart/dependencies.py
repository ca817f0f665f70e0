from typing import Optional
from fastapi import Depends, Request
from hostelmart.auth import TokenService
from hostelmart.config import Settings
from hostelmart.cookies import SessionCookieManager
from hostelmart.exceptions import AuthenticationError
from hostelmart.schemas import TokenClaims


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_cookie_manager(request: Request) -> SessionCookieManager:
    return request.app.state.cookie_manager


def get_optional_user(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
    cookies: SessionCookieManager = Depends(get_cookie_manager),
) -> Optional[TokenClaims]:
    token = cookies.get(request)
    if not token:
        return None
    return tokens.verify(token)


def get_current_user(user: Optional[TokenClaims] = Depends(get_optional_user)) -> TokenClaims:
    """
    Re-derive the current account from the session cookie.

    The route gate already redirects unauthenticated requests on protected
    paths, but it fails open, so every handler that acts as a user checks
    again here. Raises 401 if the cookie is missing, invalid or expired.
    """
    if user is None:
        raise AuthenticationError()
    return user
