"""
Tests for service layer classes.

These tests cover:
- Password hashing (app.core.security)
- UsersService against a mongomock-motor database
- Index registry
"""

import pytest
from bson import ObjectId


# =============================================================================
# Password Hashing Tests (app.core.security)
# =============================================================================

class TestPasswordHashing:
    """Tests for password hashing functions in app.core.security."""

    def test_hash_password_returns_bcrypt_hash(self):
        """hash_password should return bcrypt hash."""
        from app.core.security import hash_password

        password = "TestPassword123!"
        hashed = hash_password(password)

        # bcrypt hashes start with $2b$, cost factor 12
        assert hashed.startswith("$2b$12$")
        assert hashed != password

    def test_hash_password_different_each_time(self):
        """hash_password should produce different hashes (salt)."""
        from app.core.security import hash_password

        password = "TestPassword123!"

        hash1 = hash_password(password)
        hash2 = hash_password(password)

        # Same password should produce different hashes due to salt
        assert hash1 != hash2

    def test_hash_verifies_with_context(self):
        from app.core.security import hash_password, pwd_context

        hashed = hash_password("TestPassword123!")

        assert pwd_context.verify("TestPassword123!", hashed)
        assert not pwd_context.verify("WrongPassword123!", hashed)


# =============================================================================
# User Model Tests (app.models.user)
# =============================================================================

class TestUserModel:
    """Tests for the user document model."""

    def test_document_stores_plain_status_string(self):
        """Default status is stored as its value, not the enum member."""
        from app.models.user import User

        doc = User(email="user@example.com", password="hashed").to_document()

        assert type(doc["metadata"]["status"]) is str
        assert doc["metadata"] == {"status": "active", "verified": False}
        assert "id" not in doc

    def test_populate_by_field_name_or_alias(self):
        from app.models.user import User

        by_alias = User(_id="abc", email="user@example.com", password="hashed")
        by_name = User(id="abc", email="user@example.com", password="hashed")

        assert by_alias.id == by_name.id == "abc"


# =============================================================================
# UsersService Tests
# =============================================================================

class TestUsersServiceCreate:
    """Tests for UsersService.create_user_with_password."""

    @pytest.mark.asyncio
    async def test_create_user_stores_hashed_password(self, mock_auth_db, test_user_data):
        from app.core.security import pwd_context
        from app.schemas.user import UserCreate
        from app.services.users_service import UsersService

        service = UsersService(mock_auth_db)
        created = await service.create_user_with_password(UserCreate(**test_user_data))

        assert created.email == "testuser@example.com"
        assert created.status == "active"
        assert created.verified is False

        doc = await mock_auth_db["users"].find_one({"email": "testuser@example.com"})
        assert doc["password"] != test_user_data["password"]
        assert pwd_context.verify(test_user_data["password"], doc["password"])
        assert doc["metadata"] == {"status": "active", "verified": False}
        assert doc["created_at"] is not None
        assert doc["updated_at"] is not None

    @pytest.mark.asyncio
    async def test_create_duplicate_email_raises_conflict(self, mock_auth_db, test_user_data):
        from app.core.errors import ApiError
        from app.schemas.user import UserCreate
        from app.services.users_service import UsersService

        service = UsersService(mock_auth_db)
        await service.create_user_with_password(UserCreate(**test_user_data))

        with pytest.raises(ApiError) as exc_info:
            await service.create_user_with_password(UserCreate(**test_user_data))

        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"field": "email", "value": "testuser@example.com"}
        assert await mock_auth_db["users"].count_documents({}) == 1

    @pytest.mark.asyncio
    async def test_unique_index_conflict_maps_to_409(self, mock_auth_db, test_user_data):
        """A race past the pre-check still ends as a conflict."""
        from unittest.mock import AsyncMock

        from app.core.errors import ApiError
        from app.schemas.user import UserCreate
        from app.services.users_service import UsersService

        service = UsersService(mock_auth_db)
        await service.create_user_with_password(UserCreate(**test_user_data))
        service.users_collection.find_one = AsyncMock(return_value=None)

        with pytest.raises(ApiError) as exc_info:
            await service.create_user_with_password(UserCreate(**test_user_data))

        assert exc_info.value.status_code == 409


class TestUsersServiceRead:
    """Tests for UsersService listing and lookup."""

    @pytest.mark.asyncio
    async def test_get_all_users_excludes_password(self, mock_auth_db):
        from app.schemas.user import UserCreate
        from app.services.users_service import UsersService

        service = UsersService(mock_auth_db)
        await service.create_user_with_password(
            UserCreate(email="a@example.com", password="secret123")
        )
        await service.create_user_with_password(
            UserCreate(email="b@example.com", password="secret123")
        )

        users = await service.get_all_users()

        assert sorted(u.email for u in users) == ["a@example.com", "b@example.com"]
        for user in users:
            assert "password" not in user.model_dump()
            assert ObjectId.is_valid(user.id)

    @pytest.mark.asyncio
    async def test_get_user_by_id(self, mock_auth_db, test_user_data):
        from app.schemas.user import UserCreate
        from app.services.users_service import UsersService

        service = UsersService(mock_auth_db)
        await service.create_user_with_password(UserCreate(**test_user_data))
        doc = await mock_auth_db["users"].find_one({})

        user = await service.get_user_by_id(str(doc["_id"]))

        assert user is not None
        assert user.email == "testuser@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", ["not-an-id", str(ObjectId())])
    async def test_get_user_by_id_unknown_returns_none(self, mock_auth_db, user_id):
        from app.services.users_service import UsersService

        service = UsersService(mock_auth_db)

        assert await service.get_user_by_id(user_id) is None


# =============================================================================
# Index Registry Tests (app.database.registry)
# =============================================================================

class TestIndexRegistry:
    """Tests for collection registration and index creation."""

    def test_users_collection_registered(self):
        from app.database.registry import registered_collections

        assert registered_collections() == ["users"]

    @pytest.mark.asyncio
    async def test_create_indexes_adds_unique_email(self, mock_async_mongo_client):
        from app.database.registry import create_indexes

        db = mock_async_mongo_client["index_test"]
        await create_indexes(db)

        info = await db["users"].index_information()
        unique = [v for v in info.values() if v.get("unique")]
        assert [key for key, _ in unique[0]["key"]] == ["email"]
