"""
Boishakh Auth - FastAPI Application

Authentication service scaffold: health checks, user management backed by
MongoDB, structured logging and uniform error responses.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI

from app.config import get_settings
from app.core.logger import get_logger, setup_logging
from app.core.middleware import register_error_handlers, register_http_logger
from app.database.connections import ConnectionManager, get_connection_manager
from app.database.errors import DatabaseError
from app.database.registry import create_indexes
from app.routers import demo, health, users

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Configure logging
    - Register connection listeners and connect to MongoDB
    - Create indexes

    Shutdown:
    - Close the MongoDB connection
    """
    setup_logging()
    manager: ConnectionManager = app.state.connection_manager
    logger.info("Starting up Boishakh Auth...")

    try:
        # uvicorn owns process signals; shutdown goes through this lifespan
        db = await manager.initialize(install_signals=False)
        await create_indexes(db)
        logger.info("MongoDB connected and indexes created")
    except DatabaseError as e:
        logger.warning(f"Database initialization warning: {e}")

    yield

    logger.info("Shutting down Boishakh Auth...")
    await manager.disconnect()
    logger.info("Database connection closed")


def create_app(connection_manager: Optional[ConnectionManager] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        connection_manager: Manager owning the MongoDB connection; defaults
            to the process-wide manager.
    """
    settings = get_settings()

    app = FastAPI(
        title="Boishakh Auth API",
        description="""
## Boishakh Auth

Authentication service scaffold.

### Features
- **Health**: liveness at `/health`, MongoDB readiness at `/health/ready`
- **Users**: create users with bcrypt-hashed passwords and list them
- **Errors**: every error uses the same `{"error": {...}}` envelope
        """,
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.connection_manager = connection_manager or get_connection_manager()

    register_http_logger(app)
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(demo.router)

    @app.get("/", tags=["Root"])
    async def root():
        """Welcome endpoint with service information."""
        logger.debug("Hello world endpoint accessed")
        return {
            "message": "Hello World! 🎉",
            "service": settings.service_name,
            "version": settings.service_version,
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        }

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    run()
