"""
Backend-specific test fixtures and configuration.

These fixtures extend the global fixtures with a fake driver client so the
connection manager and the FastAPI app can run without a MongoDB server.
"""

import asyncio
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient


# =============================================================================
# Fake Driver Client
# =============================================================================

class FakeMongoClient:
    """
    Stand-in for AsyncIOMotorClient.

    Pings go through an AsyncMock; collections are served by mongomock-motor.
    """

    def __init__(self, uri: str, **options: Any):
        self.uri = uri
        self.options = options
        self.nodes = frozenset({("localhost", 27017)})
        self.admin = MagicMock()
        self.admin.command = AsyncMock(return_value={"ok": 1.0})
        self.close = MagicMock(side_effect=self._close)
        self._backing = AsyncMongoMockClient()

    def _close(self):
        self.nodes = frozenset()

    def __getitem__(self, name: str):
        return self._backing[name]


class FakeClientFactory:
    """
    Callable replacing the driver client class.

    Records every construction so tests can count connection attempts.
    """

    def __init__(self):
        self.calls: list[tuple[str, dict]] = []
        self.clients: list[FakeMongoClient] = []
        self.ping_error: Optional[BaseException] = None
        self.ping_delay: float = 0.0

    def __call__(self, uri: str, **options: Any) -> FakeMongoClient:
        self.calls.append((uri, options))
        client = FakeMongoClient(uri, **options)

        if self.ping_delay:
            delay, error = self.ping_delay, self.ping_error

            async def slow_ping(*args, **kwargs):
                await asyncio.sleep(delay)
                if error is not None:
                    raise error
                return {"ok": 1.0}

            client.admin.command.side_effect = slow_ping
        elif self.ping_error is not None:
            client.admin.command.side_effect = self.ping_error

        self.clients.append(client)
        return client

    @property
    def attempts(self) -> int:
        return len(self.calls)


# =============================================================================
# Connection Manager Fixtures
# =============================================================================

@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def connection_manager(client_factory):
    """ConnectionManager wired to the fake client factory."""
    from app.database.connections import ConnectionManager

    return ConnectionManager(client_factory=client_factory)


@pytest.fixture
def test_config():
    """Fast connection config: one attempt, no delay."""
    from app.database.config import MongoDBConfig

    return MongoDBConfig(
        uri="mongodb://localhost:27017",
        database="app_test",
        retry_attempts=1,
        retry_delay_ms=0,
    )


@pytest.fixture
def retry_config():
    """Connection config with three attempts and no delay."""
    from app.database.config import MongoDBConfig

    return MongoDBConfig(
        uri="mongodb://localhost:27017",
        database="app_test",
        retry_attempts=3,
        retry_delay_ms=0,
    )


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================

@pytest.fixture
def app(connection_manager):
    """
    Create the FastAPI app with the fake-backed connection manager.
    """
    from app.main import create_app

    return create_app(connection_manager=connection_manager)


@pytest.fixture
def client(app):
    """
    Create a TestClient for the FastAPI app.

    Entering the client runs the lifespan, which connects the manager.
    """
    with TestClient(app) as c:
        yield c


# =============================================================================
# Response Assertion Helpers
# =============================================================================

@pytest.fixture
def assert_error_response():
    """Helper to assert the error envelope."""
    def _assert(response, status_code: int, error_type: str = None):
        assert response.status_code == status_code
        data = response.json()
        assert "error" in data
        assert data["error"]["statusCode"] == status_code
        assert "errorId" in data["error"]
        if error_type:
            assert data["error"]["type"] == error_type
        return data["error"]
    return _assert
