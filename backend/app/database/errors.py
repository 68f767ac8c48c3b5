"""
Database layer exceptions.
"""


class DatabaseError(Exception):
    """Base class for connection lifecycle failures."""


class ConfigurationError(DatabaseError):
    """Connection settings are missing or malformed."""


class ConnectionFailedError(DatabaseError):
    """All connection attempts were exhausted."""

    def __init__(self, attempts: int, cause: BaseException):
        self.attempts = attempts
        self.cause = cause
        super().__init__(
            f"Failed to connect to MongoDB after {attempts} attempt(s): {cause}"
        )


class DisconnectError(DatabaseError):
    """Closing the live connection failed."""
