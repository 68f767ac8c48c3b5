"""
Users router for account creation and listing.
"""
from fastapi import APIRouter, Depends, status

from app.core.errors import ApiError
from app.dependencies.database import get_users_service
from app.schemas.user import UserCreate, UserCreated, UserResponse
from app.services.users_service import UsersService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=list[UserResponse],
    summary="List users",
)
async def get_all_users(
    users_service: UsersService = Depends(get_users_service),
):
    """List all users. Password hashes are never returned."""
    return await users_service.get_all_users()


@router.post(
    "",
    response_model=UserCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user with a password",
)
async def create_user_with_password(
    body: UserCreate,
    users_service: UsersService = Depends(get_users_service),
):
    """
    Create a new user account.

    - **email**: Valid email address (must be unique)
    - **password**: Password (minimum 6 characters)
    """
    return await users_service.create_user_with_password(body)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user by ID",
)
async def get_user(
    user_id: str,
    users_service: UsersService = Depends(get_users_service),
):
    user = await users_service.get_user_by_id(user_id)
    if user is None:
        raise ApiError.not_found("User")
    return user
