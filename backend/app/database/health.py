"""
MongoDB health check.
"""
import time
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from app.core.logger import get_logger, log_performance

if TYPE_CHECKING:
    from app.database.connections import ConnectionManager

logger = get_logger("mongodb.health")


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthCheckResult(BaseModel):
    """Outcome of a single health probe."""
    status: HealthStatus = Field(..., description="Overall database status")
    details: dict[str, Any] = Field(default_factory=dict, description="Diagnostics")

    model_config = ConfigDict(use_enum_values=True)


async def check_health(manager: "ConnectionManager") -> HealthCheckResult:
    """
    Probe the live connection with a ping.

    Never raises: failures are reported as an unhealthy result. No retries
    are made; callers poll at their own interval.
    """
    connection = manager.get_connection_info()

    if not manager.is_connected():
        return HealthCheckResult(
            status=HealthStatus.UNHEALTHY,
            details={"connection": connection, "reason": "not connected"},
        )

    started = time.perf_counter()
    try:
        await manager.client.admin.command("ping")
    except Exception as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return HealthCheckResult(
            status=HealthStatus.UNHEALTHY,
            details={"connection": connection, "error": str(e)},
        )

    log_performance("mongodb.ping", (time.perf_counter() - started) * 1000)
    return HealthCheckResult(
        status=HealthStatus.HEALTHY,
        details={"connection": connection, "ping": "successful"},
    )
