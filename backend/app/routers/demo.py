"""
Error demonstration route.
"""
from typing import Optional

from fastapi import APIRouter

from app.core.errors import ApiError

router = APIRouter(prefix="/error", tags=["Errors"])


@router.get("/demo", summary="Raise a sample error")
async def error_demo(type: Optional[str] = None, email: Optional[str] = None):
    """
    Raise an error of the requested kind to show the error response format.

    Supported types: validation, auth, forbidden, notfound, conflict,
    internal. Anything else raises an unexpected error.
    """
    if type == "validation":
        raise ApiError.validation(
            "Invalid email format", {"field": "email", "value": email}
        )
    if type == "auth":
        raise ApiError.authentication()
    if type == "forbidden":
        raise ApiError.authorization()
    if type == "notfound":
        raise ApiError.not_found("User")
    if type == "conflict":
        raise ApiError.conflict("Email already exists")
    if type == "internal":
        raise ApiError.internal("Database connection failed")
    raise RuntimeError("Unexpected error occurred")
