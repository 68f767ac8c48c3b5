"""
MongoDB connection configuration.

Resolved from the environment on every call so that changes to APP_ENV or
MONGODB_* variables are picked up by the next connection attempt.
"""
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.config import Environment, resolve_environment
from app.database.errors import ConfigurationError

URI_SCHEMES = ("mongodb://", "mongodb+srv://")

# Driver-level timeouts bound each individual attempt
DEFAULT_CLIENT_OPTIONS: dict[str, Any] = {
    "maxPoolSize": 10,
    "serverSelectionTimeoutMS": 5000,
    "socketTimeoutMS": 45000,
}

# mode -> (retry attempts, retry delay ms)
RETRY_POLICY = {
    Environment.PRODUCTION: (5, 2000),
    Environment.TESTING: (1, 500),
    Environment.DEVELOPMENT: (3, 1000),
}


class MongoSettings(BaseSettings):
    """Raw MongoDB environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "development"
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "boishakh_auth"
    mongodb_username: Optional[str] = None
    mongodb_password: Optional[str] = None
    mongodb_test_database: Optional[str] = None


class MongoDBConfig(BaseModel):
    """Parameters for a single connect-with-retry run."""

    uri: str = Field(..., description="Server URI without database path")
    database: str = Field(..., min_length=1, description="Database name")
    username: Optional[str] = None
    password: Optional[str] = None
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=1000, ge=0)
    options: dict[str, Any] = Field(default_factory=lambda: dict(DEFAULT_CLIENT_OPTIONS))

    @field_validator("uri")
    @classmethod
    def _check_uri(cls, value: str) -> str:
        return validate_uri(value)

    @property
    def connect_uri(self) -> str:
        """URI with the database name placed in the path."""
        return build_connect_uri(self.uri, self.database)

    def client_options(self) -> dict[str, Any]:
        """Keyword arguments for the driver client."""
        options = dict(self.options)
        if self.username and self.password:
            options["username"] = self.username
            options["password"] = self.password
        return options


def validate_uri(uri: Optional[str]) -> str:
    """Return a stripped URI or raise ConfigurationError."""
    uri = (uri or "").strip()
    if not uri:
        raise ConfigurationError(
            "MongoDB URI is required. Set the MONGODB_URI environment variable."
        )
    if not uri.startswith(URI_SCHEMES):
        raise ConfigurationError(
            f"Invalid MongoDB URI {uri!r}: expected one of {', '.join(URI_SCHEMES)}"
        )
    return uri


def build_connect_uri(uri: str, database: str) -> str:
    """
    Combine a server URI and a database name into one connect target.

    Any path already on the URI is replaced; query options are kept.
    """
    base, sep, query = validate_uri(uri).partition("?")
    scheme, _, rest = base.partition("://")
    hosts = rest.split("/", 1)[0]
    target = f"{scheme}://{hosts}/{database}"
    return f"{target}?{query}" if sep else target


def get_mongodb_config() -> MongoDBConfig:
    """
    Resolve the MongoDB configuration for the current deployment mode.

    | mode        | database                          | attempts | delay ms |
    |-------------|-----------------------------------|----------|----------|
    | production  | MONGODB_DATABASE                  | 5        | 2000     |
    | testing     | MONGODB_TEST_DATABASE or <db>_test| 1        | 500      |
    | development | MONGODB_DATABASE                  | 3        | 1000     |

    Credentials are only attached when both username and password are set.
    """
    settings = MongoSettings()
    environment = resolve_environment(settings.app_env)
    uri = validate_uri(settings.mongodb_uri)

    database = settings.mongodb_database
    if environment == Environment.TESTING:
        database = settings.mongodb_test_database or f"{database}_test"

    retry_attempts, retry_delay_ms = RETRY_POLICY[environment]

    return MongoDBConfig(
        uri=uri,
        database=database,
        username=settings.mongodb_username,
        password=settings.mongodb_password,
        retry_attempts=retry_attempts,
        retry_delay_ms=retry_delay_ms,
    )
