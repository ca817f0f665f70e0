import logging
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from hostelmart import crud
from hostelmart.auth import TokenService, claims_for, hash_password, verify_password
from hostelmart.config import Settings
from hostelmart.cookies import SessionCookieManager
from hostelmart.database import get_db
from hostelmart.dependencies import (
    get_app_settings,
    get_cookie_manager,
    get_current_user,
    get_token_service,
)
from hostelmart.exceptions import AuthenticationError, ConflictError
from hostelmart.schemas import (
    LoginRequest,
    RegisterRequest,
    SuccessResponse,
    TokenClaims,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    tokens: TokenService = Depends(get_token_service),
    cookies: SessionCookieManager = Depends(get_cookie_manager),
):
    """
    Create new account and start a session.

    Process:
    1. Validate input (done by Pydantic)
    2. Reject an email that is already registered
    3. Hash password
    4. Insert account
    5. Issue session token and set cookie
    6. Return account data

    Error cases:
    - 400: Missing or malformed fields
    - 409: Email already exists
    - 500: Hashing, signing or database failure
    """
    if crud.get_user_by_email(db, request.email):
        raise ConflictError("User already exists")

    # Never store plaintext passwords
    password_hash = hash_password(request.password, rounds=settings.bcrypt_rounds)

    # The unique constraint still guards against a concurrent registration
    user = crud.create_user(
        db,
        name=request.name,
        email=request.email,
        password_hash=password_hash,
        hostel=request.hostel,
        room_number=request.room_number,
        whatsapp_number=request.whatsapp_number,
    )
    logger.info(f"Registered account {user.id}")

    cookies.set(response, tokens.issue(claims_for(user)))
    return user


@router.post("/login", response_model=UserResponse)
def login(
    request: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    cookies: SessionCookieManager = Depends(get_cookie_manager),
):
    """
    Authenticate account and start a session.

    Generic error message: no indication whether the email or the
    password was wrong.
    """
    user = crud.get_user_by_email(db, request.email)

    if not user or not verify_password(request.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    cookies.set(response, tokens.issue(claims_for(user)))
    return user


@router.post("/logout", response_model=SuccessResponse)
def logout(
    response: Response,
    cookies: SessionCookieManager = Depends(get_cookie_manager),
):
    """
    Clear the session cookie.

    The token itself stays valid until it expires; there is no server-side
    revocation. Returns success even without a session (idempotent).
    """
    cookies.clear(response)
    return SuccessResponse()


@router.get("/me", response_model=TokenClaims)
def me(user: TokenClaims = Depends(get_current_user)):
    """Claims of the current session. 401 if not authenticated."""
    return user
