"""
Core module - errors, logging, middleware and security utilities.
"""
from app.core.errors import ApiError, ErrorType
from app.core.logger import get_logger, setup_logging
from app.core.security import hash_password

__all__ = [
    "ApiError",
    "ErrorType",
    "get_logger",
    "setup_logging",
    "hash_password",
]
