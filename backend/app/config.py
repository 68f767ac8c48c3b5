"""
Application configuration loaded from environment variables.
"""
from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment modes."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


def resolve_environment(value: str | None) -> Environment:
    """Map a raw APP_ENV value to a deployment mode (unknown -> development)."""
    try:
        return Environment((value or "").strip().lower())
    except ValueError:
        return Environment.DEVELOPMENT


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Deployment
    app_env: str = "development"
    port: int = 3000

    # Logging ("silent" mutes output in testing)
    log_level: str | None = None

    # Service identity
    service_name: str = "boishakh-auth"
    service_version: str = "1.0.0"

    @property
    def environment(self) -> Environment:
        return resolve_environment(self.app_env)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
