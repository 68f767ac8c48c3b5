"""
Database module - MongoDB connection lifecycle, configuration and health.
"""
from app.database.config import MongoDBConfig, get_mongodb_config
from app.database.connections import (
    ConnectionManager,
    connect,
    disconnect,
    get_connection_info,
    get_connection_manager,
    get_database,
    health_check,
    initialize,
    is_connected,
)
from app.database.errors import (
    ConfigurationError,
    ConnectionFailedError,
    DatabaseError,
    DisconnectError,
)
from app.database.health import HealthCheckResult, HealthStatus
from app.database.state import ConnectionEvent, ReadyState
from app.database.databases import auth_db

__all__ = [
    "MongoDBConfig",
    "get_mongodb_config",
    "ConnectionManager",
    "get_connection_manager",
    "initialize",
    "connect",
    "disconnect",
    "is_connected",
    "get_connection_info",
    "health_check",
    "get_database",
    "DatabaseError",
    "ConfigurationError",
    "ConnectionFailedError",
    "DisconnectError",
    "HealthCheckResult",
    "HealthStatus",
    "ConnectionEvent",
    "ReadyState",
    "auth_db",
]
