"""
Service layer for business logic.
"""
from app.services.users_service import UsersService

__all__ = [
    "UsersService",
]
