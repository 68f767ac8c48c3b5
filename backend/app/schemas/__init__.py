"""
Request and response schemas for API endpoints.
"""
from app.schemas.user import UserCreate, UserCreated, UserResponse

__all__ = [
    "UserCreate",
    "UserCreated",
    "UserResponse",
]
