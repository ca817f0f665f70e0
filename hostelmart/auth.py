import bcrypt
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional
from jose import JWTError, jwt
from jose.exceptions import JOSEError
from pydantic import ValidationError as SchemaError
from hostelmart.config import Settings
from hostelmart.exceptions import ConfigurationError, HashingError, TokenError
from hostelmart.schemas import TokenClaims

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72

# Known weak default. Only ever used outside production, and loudly.
DEV_FALLBACK_SECRET = "fallback_secret_key_for_development"
MIN_SECRET_BYTES = 32


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int) -> str:
    """
    Hash password using bcrypt at the given cost factor (Settings.bcrypt_rounds).

    Returns hash string that includes the cost factor and salt.
    Format: $2b$12$<22 char salt><31 char hash>

    Raises HashingError if bcrypt cannot run. The plaintext is never logged.
    """
    try:
        hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds))
    except (ValueError, TypeError, MemoryError) as e:
        logger.error(f"Password hashing failed: {type(e).__name__}")
        raise HashingError() from e
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against stored hash.

    Uses constant-time comparison internally to prevent timing attacks.
    Returns False for any error, including malformed digests.
    """
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Password verification failed on malformed digest: {type(e).__name__}")
        return False


def resolve_jwt_secret(settings: Settings) -> str:
    """
    Pick the token signing secret.

    A missing secret, or one shorter than 32 bytes, falls back to the fixed
    development secret. That fallback is unsafe: anyone who knows it can
    mint sessions. It is refused in production.
    """
    secret = settings.jwt_secret or ""
    if len(secret.encode("utf-8")) >= MIN_SECRET_BYTES:
        return secret

    reason = "not set" if not secret else f"shorter than {MIN_SECRET_BYTES} bytes"
    if settings.is_production:
        raise ConfigurationError(f"JWT_SECRET is {reason}; refusing to start in production")

    logger.warning(
        f"JWT_SECRET is {reason}. Falling back to the built-in development secret. "
        "Sessions signed with it can be forged; never run production like this."
    )
    return DEV_FALLBACK_SECRET


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and verifies session tokens (HS256 JWT).

    Tokens are stateless: there is no server-side record and no revocation.
    A leaked token stays valid until its exp claim passes.
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            resolve_jwt_secret(settings),
            ttl=timedelta(days=settings.session_expire_days),
            algorithm=settings.jwt_algorithm,
        )

    def issue(self, claims: Mapping[str, Any]) -> str:
        """Sign {id, email, name} plus iat and exp (iat + ttl)."""
        issued_at = self._clock()
        payload: Dict[str, Any] = {
            "id": str(claims["id"]),
            "email": claims["email"],
            "name": claims["name"],
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except JOSEError as e:
            logger.error(f"Token signing failed for account {payload['id']}: {e}")
            raise TokenError() from e

    def verify(self, token: Optional[str]) -> Optional[TokenClaims]:
        """
        Check signature and expiry together.

        Returns None for any failure: bad signature, tampering, expiry,
        malformed input or missing claims all look the same to callers.
        """
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
            return TokenClaims.model_validate(payload)
        except (JWTError, SchemaError):
            return None
        except Exception as e:
            # jose can surface decoding errors from below its own exception types
            logger.debug(f"Token rejected: {type(e).__name__}")
            return None


def claims_for(user) -> Dict[str, Any]:
    """Identity claims embedded in a session token for this account."""
    return {"id": user.id, "email": user.email, "name": user.name}
