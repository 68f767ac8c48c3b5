"""
User service for account creation and listing.
"""
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.errors import ApiError
from app.core.logger import log_user_action
from app.core.security import hash_password
from app.database.databases import auth_db
from app.models.user import User
from app.schemas.user import UserCreate, UserCreated, UserResponse

# Fields returned by listings; the password hash never leaves the service
PUBLIC_PROJECTION = {
    "email": 1,
    "metadata": 1,
    "created_at": 1,
    "updated_at": 1,
}


def _to_response(doc: dict) -> UserResponse:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return UserResponse(**doc)


class UsersService:
    """Service for user account operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        """Initialize with the auth database."""
        self.db = db
        self.users_collection = db[auth_db.Collections.USERS]

    async def get_all_users(self) -> list[UserResponse]:
        """List every user without credentials."""
        cursor = self.users_collection.find({}, PUBLIC_PROJECTION)
        docs = await cursor.to_list(length=None)
        return [_to_response(doc) for doc in docs]

    async def get_user_by_id(self, user_id: str) -> Optional[UserResponse]:
        """
        Get a user by ID.

        Returns:
            UserResponse or None if the ID is invalid or unknown
        """
        if not ObjectId.is_valid(user_id):
            return None

        doc = await self.users_collection.find_one(
            {"_id": ObjectId(user_id)}, PUBLIC_PROJECTION
        )
        return _to_response(doc) if doc else None

    async def create_user_with_password(self, request: UserCreate) -> UserCreated:
        """
        Create a user with a bcrypt-hashed password.

        Args:
            request: Validated email and password

        Returns:
            UserCreated with the account status

        Raises:
            ApiError: 409 if the email is already registered
        """
        existing = await self.users_collection.find_one({"email": request.email})
        if existing:
            raise ApiError.conflict(
                "Email already exists",
                {"field": "email", "value": request.email},
            )

        user = User(email=request.email, password=hash_password(request.password))

        try:
            result = await self.users_collection.insert_one(user.to_document())
        except DuplicateKeyError:
            raise ApiError.conflict(
                "Email already exists",
                {"field": "email", "value": request.email},
            )

        log_user_action("user_created", str(result.inserted_id), {"email": user.email})

        return UserCreated(
            email=user.email,
            status=user.metadata.status,
            verified=user.is_verified(),
        )
