"""
Pydantic models for database documents.
"""
from app.models.user import User, UserMetadata, UserStatus

__all__ = [
    "User",
    "UserMetadata",
    "UserStatus",
]
