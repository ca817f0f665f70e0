from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.
    Uses pydantic for validation and type safety.

    Resolved once at startup and handed to create_app(); components read
    their configuration from the instance they are given, never from here.
    """
    environment: str = "development"
    debug: bool = False

    database_url: str = "sqlite:///./hostelmart.db"

    # HS256 signing secret for session tokens. Must be at least 32 bytes.
    # Missing or short secrets fall back to a fixed development key,
    # which is refused when environment is production.
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"

    # Session token and cookie lifetime
    session_expire_days: int = 7
    cookie_name: str = "auth_token"

    # Lax allows cookie on normal navigation but blocks on CSRF-prone requests
    cookie_samesite: str = "lax"

    # bcrypt cost factor, the single source for hashing. Digests embed it,
    # so existing hashes keep verifying if this changes.
    bcrypt_rounds: int = 12

    log_level: str = "INFO"

    # Extra origins allowed by CORS; debug mode allows all
    cors_origins: List[str] = []

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def session_max_age(self) -> int:
        """Session lifetime in seconds, shared by the token and the cookie."""
        return self.session_expire_days * 24 * 3600


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance. Load once, reuse throughout application lifecycle.
    """
    return Settings()
