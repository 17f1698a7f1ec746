from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "America/New_York"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth
    # Placeholder values keep local/test runs from failing when a real
    # secret is not configured. Real deployments must override via env.
    AUTH_JWT_SECRET: str = "test-jwt-secret"
    AUTH_JWT_AUDIENCE: Optional[str] = None

    # CRM (contact + tag sync)
    CRM_API_URL: str = "https://services.leadconnectorhq.com"
    CRM_API_KEY: Optional[str] = None
    CRM_LOCATION_ID: Optional[str] = None

    # Notifications service (booking confirmations)
    NOTIFICATIONS_URL: Optional[str] = None
    INTEGRATION_TIMEOUT_SECONDS: float = 5.0

    # Scheduling
    SLOT_INTERVAL_MINUTES: int = 30
    DEFAULT_SESSION_MINUTES: int = 60

    # Training curriculum override (JSON file)
    CURRICULUM_PATH: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def is_postgres(self) -> bool:
        return self.DATABASE_URL.startswith("postgresql")


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
