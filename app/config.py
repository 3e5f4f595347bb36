"""Configuration settings for Campus Events."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./campus_events.db")

    # Sessions
    SESSION_TTL_HOURS: int = int(os.getenv("SESSION_TTL_HOURS", "24"))
    SESSION_COOKIE_SECURE: bool = _env_bool("SESSION_COOKIE_SECURE", "true")

    # Tokens
    SETUP_TOKEN_TTL_DAYS: int = int(os.getenv("SETUP_TOKEN_TTL_DAYS", "7"))
    PASSWORD_RESET_TTL_MINUTES: int = int(os.getenv("PASSWORD_RESET_TTL_MINUTES", "10"))

    # Password policy
    PASSWORD_MIN_LENGTH: int = int(os.getenv("PASSWORD_MIN_LENGTH", "20"))
    PASSWORD_MIN_ENTROPY_BITS: float = float(os.getenv("PASSWORD_MIN_ENTROPY_BITS", "80"))

    # Argon2id cost parameters
    ARGON2_TIME_COST: int = int(os.getenv("ARGON2_TIME_COST", "3"))
    ARGON2_MEMORY_COST: int = int(os.getenv("ARGON2_MEMORY_COST", "65536"))  # KiB
    ARGON2_PARALLELISM: int = int(os.getenv("ARGON2_PARALLELISM", "4"))

    # Links embedded in outgoing mail
    REGISTRATION_BASE_URL: str = os.getenv("REGISTRATION_BASE_URL", "http://localhost:3000/register")
    PASSWORD_RESET_BASE_URL: str = os.getenv("PASSWORD_RESET_BASE_URL", "http://localhost:3000/reset-password")

    # First admin, invited on startup when no admin exists yet
    BOOTSTRAP_ADMIN_EMAIL: str = os.getenv("BOOTSTRAP_ADMIN_EMAIL", "")
    BOOTSTRAP_ADMIN_NAME: str = os.getenv("BOOTSTRAP_ADMIN_NAME", "Administrator")

    # Application
    ALLOWED_ORIGINS: str = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = _env_bool("DEBUG", "false")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def allowed_origins(self) -> list[str]:
        """Parsed CORS origins, blanks dropped."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        warnings = []
        if not self.SESSION_COOKIE_SECURE and self.APP_ENV != "development":
            warnings.append("SESSION_COOKIE_SECURE is disabled outside development - session cookies sent over HTTP")
        if self.SESSION_TTL_HOURS <= 0:
            warnings.append("SESSION_TTL_HOURS must be positive - sessions will expire immediately")
        if not self.allowed_origins:
            warnings.append("ALLOWED_ORIGINS is empty - browsers will not be able to send credentials")
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
