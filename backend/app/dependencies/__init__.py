"""
Dependencies for dependency injection in routes.
"""
from app.dependencies.database import get_connection_manager, get_users_service

__all__ = [
    "get_connection_manager",
    "get_users_service",
]
