"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.

Two secrets are kept separate: JWT_SECRET signs
session tokens, EMAIL_ENCRYPTION_SECRET seeds the key that
protects donor emails. Rotating one must not invalidate the other.
"""

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "dev-only-jwt-secret-change-me"
DEV_EMAIL_SECRET = "dev-only-email-secret-change-me"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        # Application
        self.APP_NAME: str = "Donation Tracker"
        self.APP_VERSION: str = "0.1.0"
        self.DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Server
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "8000"))

        # Database
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL",
            "postgresql://localhost:5432/donation_tracker"
        )

        # Environment
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

        # Session tokens
        self.JWT_SECRET: str = os.getenv("JWT_SECRET", "")
        self.JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRE_HOURS: int = int(os.getenv("JWT_EXPIRE_HOURS", "24"))

        # Donor email encryption
        self.EMAIL_ENCRYPTION_SECRET: str = os.getenv(
            "EMAIL_ENCRYPTION_SECRET", ""
        )
        self.EMAIL_KDF_SALT: str = os.getenv(
            "EMAIL_KDF_SALT", "donation-tracker:donor-email:v1"
        )

        # Account security
        self.BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
        self.MAX_FAILED_LOGIN_ATTEMPTS: int = int(
            os.getenv("MAX_FAILED_LOGIN_ATTEMPTS", "5")
        )
        self.LOCKOUT_MINUTES: int = int(os.getenv("LOCKOUT_MINUTES", "30"))

        # Rate limiting, per client IP
        self.RATE_LIMIT_ENABLED: bool = (
            os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
        )
        self.RATE_LIMIT_STORAGE_URI: str = os.getenv(
            "RATE_LIMIT_STORAGE_URI", "memory://"
        )
        self.PUBLIC_RATE_LIMIT: str = os.getenv("PUBLIC_RATE_LIMIT", "100/15 minutes")
        self.ADMIN_RATE_LIMIT: str = os.getenv("ADMIN_RATE_LIMIT", "50/15 minutes")
        self.LOGIN_RATE_LIMIT: str = os.getenv("LOGIN_RATE_LIMIT", "5/15 minutes")

        self._apply_secret_defaults()

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def _apply_secret_defaults(self) -> None:
        """
        Fill in development secrets when none are configured.

        In production a missing secret is a startup error.
        """
        missing = [
            name for name in ("JWT_SECRET", "EMAIL_ENCRYPTION_SECRET")
            if not getattr(self, name)
        ]
        if not missing:
            return

        if self.is_production:
            raise RuntimeError(
                f"Missing required secrets: {', '.join(missing)}"
            )

        logger.warning(
            "Using insecure development defaults for %s", ", ".join(missing)
        )
        if not self.JWT_SECRET:
            self.JWT_SECRET = DEV_JWT_SECRET
        if not self.EMAIL_ENCRYPTION_SECRET:
            self.EMAIL_ENCRYPTION_SECRET = DEV_EMAIL_SECRET


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
