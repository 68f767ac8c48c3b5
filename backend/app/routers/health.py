"""
Health check router for liveness and readiness probes.
"""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.core.logger import get_logger
from app.database.connections import ConnectionManager
from app.database.health import HealthStatus
from app.dependencies.database import get_connection_manager

router = APIRouter(tags=["Health"])
logger = get_logger("health")

_started_at = time.monotonic()


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check():
    """
    Liveness check.
    Returns 200 while the process is serving requests; does not touch MongoDB.
    """
    logger.debug("Health check endpoint accessed")
    return {
        "status": "OK",
        "message": "Service is healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "uptime": time.monotonic() - _started_at,
        "environment": get_settings().environment.value,
    }


@router.get(
    "/health/ready",
    summary="Readiness check with database probe",
    responses={503: {"description": "MongoDB is unreachable"}},
)
async def readiness_check(
    manager: ConnectionManager = Depends(get_connection_manager),
):
    """
    Readiness check that pings MongoDB.
    Returns 200 when healthy, 503 otherwise.
    """
    result = await manager.health_check()
    status_code = (
        status.HTTP_200_OK
        if result.status == HealthStatus.HEALTHY.value
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))
