"""
API error type used across routes, services and exception handlers.
"""
import secrets
import time
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from fastapi import status

from app.config import Environment, get_settings


class ErrorType(str, Enum):
    """Error categories exposed in API responses."""
    VALIDATION = "VALIDATION_ERROR"
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"
    NOT_FOUND = "NOT_FOUND_ERROR"
    CONFLICT = "CONFLICT_ERROR"
    RATE_LIMIT = "RATE_LIMIT_ERROR"
    INTERNAL = "INTERNAL_ERROR"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE_ERROR"
    DATABASE = "DATABASE_ERROR"
    NETWORK = "NETWORK_ERROR"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _generate_error_id() -> str:
    """Short sortable id: base36 millis + random suffix."""
    millis = int(time.time() * 1000)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    encoded = ""
    while millis:
        millis, rem = divmod(millis, 36)
        encoded = digits[rem] + encoded
    return f"{encoded}-{secrets.token_hex(3)}"


class ApiError(Exception):
    """
    Error raised by request handlers and services.

    Operational errors are expected business failures (bad input, missing
    resources). Non-operational errors are bugs or infrastructure failures and
    never expose their message to the client.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: ErrorType = ErrorType.INTERNAL,
        details: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
        is_operational: bool = True,
    ):
        super().__init__(message)
        settings = get_settings()

        self.message = message
        self.status_code = status_code
        self.type = error_type
        self.details = details
        self.metadata = {
            **(metadata or {}),
            "timestamp": _now_iso(),
            "environment": settings.environment.value,
            "service": settings.service_name,
            "version": settings.service_version,
        }
        self.is_operational = is_operational
        self.timestamp = _now_iso()
        self.error_id = _generate_error_id()

    @property
    def stack(self) -> Optional[str]:
        if self.__traceback__ is None:
            return None
        return "".join(
            traceback.format_exception(type(self), self, self.__traceback__)
        )

    def to_dict(self) -> dict[str, Any]:
        """Response body for API clients."""
        environment = get_settings().environment
        error: dict[str, Any] = {
            "message": self.message,
            "type": self.type.value,
            "statusCode": self.status_code,
            "timestamp": self.timestamp,
            "errorId": self.error_id,
        }

        if self.details and environment != Environment.PRODUCTION:
            error["details"] = self.details

        if environment == Environment.DEVELOPMENT and self.stack:
            error["stack"] = self.stack

        return {"error": error}

    def to_log_dict(self) -> dict[str, Any]:
        """Structured representation for log records."""
        return {
            "message": self.message,
            "errorId": self.error_id,
            "statusCode": self.status_code,
            "type": self.type.value,
            "name": type(self).__name__,
            "stack": self.stack,
            "isOperational": self.is_operational,
            "timestamp": self.timestamp,
            "details": self.details,
            "metadata": self.metadata,
        }

    def should_expose_to_client(self) -> bool:
        return self.is_operational and self.status_code < 500

    def log_level(self) -> str:
        if self.status_code >= 500:
            return "error"
        if self.status_code >= 400:
            return "warning"
        return "info"

    # Factories

    @classmethod
    def validation(
        cls,
        message: str,
        details: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        return cls(
            message,
            status.HTTP_400_BAD_REQUEST,
            ErrorType.VALIDATION,
            details,
            metadata,
        )

    @classmethod
    def authentication(
        cls,
        message: str = "Authentication required",
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        return cls(
            message,
            status.HTTP_401_UNAUTHORIZED,
            ErrorType.AUTHENTICATION,
            None,
            metadata,
        )

    @classmethod
    def authorization(
        cls,
        message: str = "Insufficient permissions",
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        return cls(
            message,
            status.HTTP_403_FORBIDDEN,
            ErrorType.AUTHORIZATION,
            None,
            metadata,
        )

    @classmethod
    def not_found(
        cls,
        resource: str = "Resource",
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        return cls(
            f"{resource} not found",
            status.HTTP_404_NOT_FOUND,
            ErrorType.NOT_FOUND,
            {"resource": resource},
            metadata,
        )

    @classmethod
    def conflict(
        cls,
        message: str,
        details: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        return cls(
            message,
            status.HTTP_409_CONFLICT,
            ErrorType.CONFLICT,
            details,
            metadata,
        )

    @classmethod
    def rate_limit_exceeded(
        cls,
        message: str = "Rate limit exceeded",
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        return cls(
            message,
            status.HTTP_429_TOO_MANY_REQUESTS,
            ErrorType.RATE_LIMIT,
            None,
            metadata,
        )

    @classmethod
    def internal(
        cls,
        message: str = "Internal server error",
        details: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        return cls(
            message,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorType.INTERNAL,
            details,
            metadata,
            is_operational=False,
        )

    @classmethod
    def database(
        cls,
        message: str,
        details: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        return cls(
            message,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorType.DATABASE,
            details,
            metadata,
            is_operational=False,
        )

    @classmethod
    def external_service(
        cls,
        service_name: str,
        message: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        return cls(
            message or f"External service '{service_name}' is unavailable",
            status.HTTP_502_BAD_GATEWAY,
            ErrorType.EXTERNAL_SERVICE,
            {"service": service_name},
            metadata,
            is_operational=False,
        )

    @classmethod
    def from_error(
        cls,
        error: Exception,
        status_code: Optional[int] = None,
        error_type: Optional[ErrorType] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> "ApiError":
        """Wrap an arbitrary exception (ApiError instances pass through)."""
        if isinstance(error, ApiError):
            return error

        wrapped = cls(
            str(error) or type(error).__name__,
            status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type or ErrorType.INTERNAL,
            None,
            metadata,
            is_operational=False,
        )
        wrapped.__traceback__ = error.__traceback__
        return wrapped
