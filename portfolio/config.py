"""
Single source of truth for application configuration.
All settings are typed and loaded from environment variables.
"""
from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with graceful degradation.

    - If DATABASE_URL is missing, all content lives in the JSON data file
    - If admin credentials are missing, the admin API rejects every login
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # === Site ===
    SITE_NAME: str = Field(
        default="Portfolio",
        description="Name shown in page titles"
    )
    ALLOWED_ORIGINS: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="CORS allowed origins"
    )
    LOG_LEVEL: str = Field(default="INFO")

    # === Database ===
    DATABASE_URL: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL of the primary store (JSON-only mode if unset)"
    )
    DATA_FILE: str = Field(
        default="./data/portfolio.json",
        description="JSON fallback store"
    )
    DB_CONNECT_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    DB_HEALTH_CACHE_SECONDS: float = Field(
        default=30.0,
        ge=0,
        description="How long a reachability check result is reused"
    )

    # === Retry Configuration ===
    DB_RETRY_MAX_ATTEMPTS: int = Field(default=3, ge=1, le=10)
    DB_RETRY_WAIT_MIN_SECONDS: float = Field(default=1.0, ge=0)
    DB_RETRY_WAIT_MAX_SECONDS: float = Field(default=10.0, ge=0)

    # === Admin Authentication ===
    ADMIN_USERNAME: Optional[str] = Field(default=None)
    ADMIN_PASSWORD: Optional[str] = Field(default=None)
    SECRET_KEY: Optional[str] = Field(
        default=None,
        description="Cookie signing secret (falls back to ADMIN_PASSWORD)"
    )
    AUTH_COOKIE_NAME: str = Field(default="admin-auth")
    AUTH_COOKIE_MAX_AGE_SECONDS: int = Field(default=24 * 60 * 60, ge=60)
    COOKIE_SECURE: bool = Field(
        default=False,
        description="Only send the auth cookie over HTTPS"
    )

    @property
    def database_configured(self) -> bool:
        """Check if a primary database is configured."""
        return bool(self.DATABASE_URL)

    @property
    def admin_configured(self) -> bool:
        """Check if admin credentials are available."""
        return bool(self.ADMIN_USERNAME and self.ADMIN_PASSWORD)

    @property
    def cookie_secret(self) -> Optional[str]:
        return self.SECRET_KEY or self.ADMIN_PASSWORD


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This is the single entry point for all configuration.
    The LRU cache ensures we only parse env vars once.
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Force reload settings from environment.
    Useful for testing or when env vars change at runtime.
    """
    get_settings.cache_clear()
    return get_settings()
