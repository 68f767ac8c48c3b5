"""
Tests for health check endpoints.

These tests verify:
- Basic health endpoint returns 200 without touching MongoDB
- Root endpoint returns service information
- Readiness check reports database connection status
"""

from unittest.mock import AsyncMock


class TestHealthEndpoint:
    """Tests for GET /health endpoint."""

    def test_health_endpoint_returns_200_when_api_running(self, client):
        """Basic health check should return 200 if API is up."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "OK"
        assert data["message"] == "Service is healthy"
        assert data["environment"] == "testing"
        assert data["uptime"] >= 0
        assert data["timestamp"].endswith("Z")

    def test_health_does_not_ping_database(self, client, client_factory):
        ping = client_factory.clients[0].admin.command
        ping.reset_mock()

        client.get("/health")

        ping.assert_not_called()


class TestRootEndpoint:
    """Tests for GET / endpoint."""

    def test_root_returns_service_info(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Hello World! 🎉"
        assert data["service"] == "boishakh-auth"
        assert data["version"] == "1.0.0"
        assert "timestamp" in data


class TestReadinessEndpoint:
    """Tests for GET /health/ready endpoint."""

    def test_readiness_returns_200_when_mongodb_healthy(self, client):
        """Readiness check should return 200 when MongoDB answers the ping."""
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["details"]["ping"] == "successful"
        assert data["details"]["connection"]["is_connected"] is True
        assert data["details"]["connection"]["models"] == ["users"]

    def test_readiness_returns_503_when_ping_fails(self, client, client_factory):
        """Readiness should report MongoDB unhealthy when the ping fails."""
        client_factory.clients[0].admin.command = AsyncMock(
            side_effect=Exception("Connection refused")
        )

        response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert "Connection refused" in data["details"]["error"]

    def test_readiness_returns_503_when_startup_connect_failed(self, client_factory, app):
        """The app still starts when MongoDB is down; readiness reports it."""
        from fastapi.testclient import TestClient

        client_factory.ping_error = ConnectionError("connection refused")

        with TestClient(app) as c:
            response = c.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["details"]["reason"] == "not connected"
