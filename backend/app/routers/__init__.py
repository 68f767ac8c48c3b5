"""
API Routers module.
"""
from app.routers import demo, health, users

__all__ = ["demo", "health", "users"]
