"""
Database dependencies for route handlers.
"""
from fastapi import Depends, Request

from app.database.connections import ConnectionManager
from app.services.users_service import UsersService


def get_connection_manager(request: Request) -> ConnectionManager:
    """The connection manager owned by the running application."""
    return request.app.state.connection_manager


async def get_users_service(
    manager: ConnectionManager = Depends(get_connection_manager),
) -> UsersService:
    """
    UsersService bound to the shared database.

    Connecting here is idempotent: the live handle is reused and concurrent
    requests share one in-flight attempt.
    """
    db = await manager.connect()
    return UsersService(db)
