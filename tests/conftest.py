"""
Global test fixtures for Boishakh Auth.

This module provides shared fixtures for all tests including:
- Test environment variables (testing mode, silent logging)
- Mock MongoDB (mongomock-motor)
- User payload factories
"""

import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

# Must be set before app.config caches its settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "silent")


# =============================================================================
# MongoDB Fixtures (mongomock-motor)
# =============================================================================

@pytest_asyncio.fixture
async def mock_async_mongo_client():
    """
    Create an async mock MongoDB client using mongomock-motor.
    """
    try:
        from mongomock_motor import AsyncMongoMockClient
        client = AsyncMongoMockClient()
        yield client
        client.close()
    except ImportError:
        pytest.skip("mongomock-motor not installed")


@pytest_asyncio.fixture
async def mock_auth_db(mock_async_mongo_client):
    """Provide mock auth database with the real indexes."""
    from app.database.registry import create_indexes

    db = mock_async_mongo_client["boishakh_auth_test"]
    await create_indexes(db)
    yield db


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture
def clean_mongo_env(monkeypatch):
    """Remove every MONGODB_* variable so tests start from defaults."""
    for name in list(os.environ):
        if name.startswith("MONGODB_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("APP_ENV", "testing")
    return monkeypatch


@pytest.fixture
def use_environment(monkeypatch):
    """
    Switch APP_ENV for one test.

    The cached settings and the service logger are rebuilt on the way in
    and restored on the way out.
    """
    from app.config import get_settings
    from app.core.logger import setup_logging

    def _use(value: str):
        monkeypatch.setenv("APP_ENV", value)
        get_settings.cache_clear()
        return get_settings()

    yield _use

    monkeypatch.undo()
    get_settings.cache_clear()
    setup_logging()


# =============================================================================
# User Fixtures
# =============================================================================

@pytest.fixture
def test_user_data() -> dict:
    """Basic test user data for creation."""
    return {
        "email": "testuser@example.com",
        "password": "SecurePassword123!",
    }
