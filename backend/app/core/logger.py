"""
Logging setup and structured logging helpers.

Output depends on the deployment mode:
- development: console lines plus JSON files under logs/
- testing: compact "[TEST]" console lines, muted with LOG_LEVEL=silent
- production: one JSON object per line on stdout
"""
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from app.config import Environment, get_settings
from app.core.errors import ApiError

LOGGER_NAME = "boishakh_auth"
LOG_DIR = Path("logs")
SLOW_OPERATION_MS = 1000

logger = logging.getLogger(LOGGER_NAME)


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON documents."""

    def __init__(self, service: str, version: str, environment: str):
        super().__init__()
        self.service = service
        self.version = version
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "service": self.service,
            "version": self.version,
            "environment": self.environment,
        }
        if record.exc_info:
            entry["stack"] = self.formatException(record.exc_info)
        metadata = getattr(record, "metadata", None)
        if metadata:
            entry["metadata"] = metadata
        return json.dumps(entry, default=str)


def _console_handler(formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    return handler


def _file_handler(filename: str, formatter: logging.Formatter, level: int = logging.NOTSET) -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(LOG_DIR / filename, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> logging.Logger:
    """
    Configure the service logger for the current deployment mode.

    Safe to call repeatedly: existing handlers are replaced.
    """
    settings = get_settings()
    environment = settings.environment
    json_formatter = JsonFormatter(
        settings.service_name, settings.service_version, environment.value
    )

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    if environment == Environment.PRODUCTION:
        logger.setLevel(logging.INFO)
        logger.addHandler(_console_handler(json_formatter))

    elif environment == Environment.TESTING:
        logger.setLevel(logging.DEBUG)
        logger.addHandler(_console_handler(logging.Formatter(
            "[TEST] %(asctime)s %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )))
        if (settings.log_level or "").lower() == "silent":
            logger.setLevel(logging.CRITICAL + 1)

    else:
        logger.setLevel(logging.DEBUG)
        logger.addHandler(_console_handler(logging.Formatter(
            "%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )))
        logger.addHandler(_file_handler("error.log", json_formatter, logging.ERROR))
        logger.addHandler(_file_handler("combined.log", json_formatter))

    logger.info(f"Logger initialized for environment: {environment.value}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child of the service logger for a specific module."""
    return logger.getChild(name)


# ==================== Structured helpers ====================

def log_error(
    message: str,
    error: Optional[BaseException] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> None:
    """Log an error with its structured representation attached."""
    data: dict[str, Any] = dict(metadata or {})
    if error is not None:
        if isinstance(error, ApiError):
            data["error"] = error.to_log_dict()
        else:
            data["error"] = {
                "name": type(error).__name__,
                "message": str(error),
            }

    exc_info = None
    if error is not None and error.__traceback__ is not None:
        exc_info = (type(error), error, error.__traceback__)
    logger.error(message, exc_info=exc_info, extra={"metadata": data})


def log_performance(
    operation: str,
    duration_ms: float,
    metadata: Optional[dict[str, Any]] = None,
) -> None:
    """Log an operation duration, warning when it is slow."""
    data = {"operation": operation, "duration": f"{duration_ms:.0f}ms", **(metadata or {})}

    if duration_ms > SLOW_OPERATION_MS:
        logger.warning(f"Slow operation detected: {operation}", extra={"metadata": data})
    else:
        logger.debug(f"Operation completed: {operation}", extra={"metadata": data})


def log_user_action(
    action: str,
    user_id: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> None:
    """Audit-style log line for user-facing actions."""
    data = {
        "action": action,
        "user_id": user_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **(metadata or {}),
    }
    logger.info(f"User action: {action}", extra={"metadata": data})
