"""
Marketplace exception taxonomy.

Library errors (bcrypt, jose, SQLAlchemy) are caught where they are raised,
logged with context and re-raised as one of these. The handlers registered
by register_exception_handlers() turn them into JSON responses, so raw
internal exceptions never reach the client.

Usage:
    from hostelmart.exceptions import NotFoundError

    if not product:
        raise NotFoundError("Product not found")
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base exception for all marketplace errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


# ============================================
# Client errors
# ============================================

class ValidationError(MarketplaceError):
    """Missing or malformed input"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Missing required fields", fields: Optional[list] = None):
        details = {"fields": fields} if fields else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class AuthenticationError(MarketplaceError):
    """Bad credentials, or a missing/invalid/expired session"""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(MarketplaceError):
    """Acting on another account's resource"""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class ConflictError(MarketplaceError):
    """Duplicate email or hostel name"""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Already exists"):
        super().__init__(message, code="CONFLICT")


# ============================================
# Server errors
# ============================================

class InternalError(MarketplaceError):
    """Hashing, signing or store failure. Message is safe to show clients."""

    def __init__(self, message: str = "Something went wrong", code: str = "INTERNAL_ERROR"):
        super().__init__(message, code=code)


class HashingError(InternalError):
    def __init__(self, message: str = "Password hashing failed"):
        super().__init__(message, code="HASHING_FAILED")


class TokenError(InternalError):
    def __init__(self, message: str = "Session token could not be issued"):
        super().__init__(message, code="TOKEN_FAILED")


class StoreError(InternalError):
    def __init__(self, message: str = "Something went wrong"):
        super().__init__(message, code="STORE_ERROR")


class ConfigurationError(InternalError):
    """Raised at startup for configurations that must not run"""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION_ERROR")


# ============================================
# Handlers
# ============================================

async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        if loc:
            fields.append(".".join(loc))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationError(fields=fields).to_dict(),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=InternalError().to_dict(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
