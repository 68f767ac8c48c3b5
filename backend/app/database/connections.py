"""
MongoDB connection lifecycle management.

ConnectionManager owns the single shared client for the process: it connects
with a fixed-delay retry loop, deduplicates concurrent connect calls, tracks
lifecycle state fed by driver events, and closes the client on shutdown.

The module-level functions operate on a lazily created default manager.
"""
import asyncio
import inspect
import time
from typing import Any, Callable, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.logger import get_logger, log_error, log_performance
from app.database.config import MongoDBConfig, get_mongodb_config
from app.database.errors import ConnectionFailedError, DisconnectError
from app.database.events import (
    DriverEventListener,
    install_signal_handlers,
    register_event_listeners,
)
from app.database.health import HealthCheckResult, check_health
from app.database.registry import registered_collections
from app.database.state import ConnectionEvent, ConnectionState, ReadyState

logger = get_logger("mongodb")

ClientFactory = Callable[..., AsyncIOMotorClient]
Observer = Callable[[ConnectionEvent, Optional[BaseException]], None]


async def _close_client(client: Any) -> None:
    result = client.close()
    if inspect.isawaitable(result):
        await result


def _retrieve_exception(future: asyncio.Future) -> None:
    # Marks a failed attempt as retrieved when every awaiting caller was cancelled
    if not future.cancelled():
        future.exception()


def _redact(uri: str) -> str:
    """Drop credentials from a URI before logging it."""
    scheme, sep, rest = uri.partition("://")
    if not sep or "@" not in rest.split("/", 1)[0]:
        return uri
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


class ConnectionManager:
    """Owner of the process-wide MongoDB connection."""

    def __init__(self, client_factory: ClientFactory = AsyncIOMotorClient):
        self._client_factory = client_factory
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None
        self._config: Optional[MongoDBConfig] = None
        self._pending: Optional[asyncio.Future] = None
        self._state = ConnectionState()
        self._driver_listener: Optional[DriverEventListener] = None
        self._observers: list[Observer] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    # ==================== Introspection ====================

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def client(self) -> Optional[AsyncIOMotorClient]:
        return self._client

    @property
    def database(self) -> Optional[AsyncIOMotorDatabase]:
        return self._database

    @property
    def driver_listener(self) -> Optional[DriverEventListener]:
        return self._driver_listener

    @property
    def ready_state(self) -> ReadyState:
        """Status reported by the live handle rather than the cached flag."""
        if self._state.is_disconnecting:
            return ReadyState.DISCONNECTING
        if self._pending is not None:
            return ReadyState.CONNECTING
        if self._client is None:
            return ReadyState.DISCONNECTED
        return ReadyState.CONNECTED if self._client.nodes else ReadyState.DISCONNECTED

    def is_connected(self) -> bool:
        return self._state.is_connected and self.ready_state == ReadyState.CONNECTED

    def get_connection_info(self) -> dict[str, Any]:
        """Snapshot of the connection; no side effects."""
        host, port = None, None
        if self._client is not None:
            nodes = sorted(self._client.nodes or ())
            if nodes:
                host, port = nodes[0]

        return {
            "is_connected": self.is_connected(),
            "ready_state": int(self.ready_state),
            "host": host,
            "port": port,
            "name": self._database.name if self._database is not None else None,
            "models": registered_collections(),
        }

    # ==================== Events ====================

    def attach_driver_listener(self, listener: DriverEventListener) -> None:
        self._driver_listener = listener

    def add_observer(self, observer: Observer) -> None:
        self._observers.append(observer)

    def _transition(self, event: ConnectionEvent) -> None:
        self._state.apply(event)

    def _handle_driver_event(
        self, event: ConnectionEvent, error: Optional[BaseException] = None
    ) -> None:
        # Late events from a client that has already been closed
        if self._client is None and self._pending is None:
            return
        self._transition(event)
        for observer in self._observers:
            observer(event, error)

    def dispatch_driver_event(
        self, event: ConnectionEvent, error: Optional[BaseException] = None
    ) -> None:
        """Entry point for driver callbacks, which arrive on monitor threads."""
        loop = self._loop
        if loop is None or loop.is_closed():
            self._handle_driver_event(event, error)
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            self._handle_driver_event(event, error)
        else:
            loop.call_soon_threadsafe(self._handle_driver_event, event, error)

    # ==================== Lifecycle ====================

    async def initialize(
        self,
        config: Optional[MongoDBConfig] = None,
        install_signals: bool = True,
    ) -> AsyncIOMotorDatabase:
        """Register lifecycle listeners, then connect."""
        register_event_listeners(self)
        if install_signals:
            install_signal_handlers(self)
        return await self.connect(config)

    async def connect(self, config: Optional[MongoDBConfig] = None) -> AsyncIOMotorDatabase:
        """
        Return the shared database handle, connecting if needed.

        Concurrent callers share one in-flight attempt. Raises
        ConnectionFailedError once every retry has failed.
        """
        if self._state.is_connected and self.ready_state == ReadyState.CONNECTED:
            return self._database

        if self._pending is None:
            config = config or get_mongodb_config()
            self._loop = asyncio.get_running_loop()
            self._pending = asyncio.ensure_future(self._connect(config))
            self._pending.add_done_callback(_retrieve_exception)

        return await asyncio.shield(self._pending)

    async def _connect(self, config: MongoDBConfig) -> AsyncIOMotorDatabase:
        self._transition(ConnectionEvent.CONNECTING)
        if self._driver_listener is not None:
            self._driver_listener.reset()

        stale, self._client, self._database = self._client, None, None
        if stale is not None:
            logger.warning("Discarding stale MongoDB client before reconnecting")
            try:
                await _close_client(stale)
            except Exception as e:
                log_error("Error closing stale MongoDB client", e)

        try:
            client = await self._connect_with_retry(config)
        except BaseException:
            self._transition(ConnectionEvent.CONNECT_FAILED)
            raise
        else:
            self._client = client
            self._database = client[config.database]
            self._config = config
            self._transition(ConnectionEvent.CONNECTED)
            return self._database
        finally:
            self._pending = None

    async def _connect_with_retry(self, config: MongoDBConfig) -> AsyncIOMotorClient:
        """Fixed-delay retry loop; each attempt is bounded by driver timeouts."""
        target = _redact(config.connect_uri)
        options = config.client_options()
        if self._driver_listener is not None:
            options["event_listeners"] = [self._driver_listener]

        for attempt in range(1, config.retry_attempts + 1):
            final_attempt = attempt == config.retry_attempts
            started = time.perf_counter()
            client = None
            try:
                client = self._client_factory(config.connect_uri, **options)
                await client.admin.command("ping")
            except Exception as e:
                logger.error(
                    f"MongoDB connection attempt {attempt}/{config.retry_attempts} failed: {e}",
                    extra={"metadata": {
                        "attempt": attempt,
                        "error": str(e),
                        "final_attempt": final_attempt,
                    }},
                )
                if client is not None:
                    try:
                        await _close_client(client)
                    except Exception as close_error:
                        logger.debug(f"Ignoring close failure after attempt {attempt}: {close_error}")

                if final_attempt:
                    raise ConnectionFailedError(attempt, e) from e
                await asyncio.sleep(config.retry_delay_ms / 1000)
                continue

            log_performance(
                "mongodb.connect",
                (time.perf_counter() - started) * 1000,
                {"attempt": attempt},
            )
            logger.info(f"MongoDB connected on attempt {attempt} to {target}")
            return client

        raise AssertionError("retry_attempts must be >= 1")

    async def disconnect(self) -> None:
        """
        Close the shared client.

        An in-flight connect attempt is allowed to settle first and the
        client it opened is closed. No-op when the ready state is already
        DISCONNECTED and no client is held. Close failures are logged and
        re-raised as DisconnectError.
        """
        if self._pending is not None:
            # Attempts are never cancelled; failures reach the connect callers
            await asyncio.wait({self._pending})

        state = self.ready_state
        if state == ReadyState.DISCONNECTING or (
            state == ReadyState.DISCONNECTED and self._client is None
        ):
            logger.debug("MongoDB already disconnected")
            return

        self._transition(ConnectionEvent.DISCONNECTING)
        try:
            await _close_client(self._client)
        except Exception as e:
            self._transition(ConnectionEvent.DISCONNECT_FAILED)
            log_error("Error disconnecting from MongoDB", e)
            raise DisconnectError(f"Failed to disconnect from MongoDB: {e}") from e

        self._client = None
        self._database = None
        self._pending = None
        self._transition(ConnectionEvent.DISCONNECTED)
        logger.info("MongoDB disconnected successfully")

    async def health_check(self) -> HealthCheckResult:
        return await check_health(self)


# ==================== Default manager ====================

_manager: Optional[ConnectionManager] = None


def get_connection_manager() -> ConnectionManager:
    """Get or create the process default manager."""
    global _manager
    if _manager is None:
        _manager = ConnectionManager()
    return _manager


async def initialize(
    config: Optional[MongoDBConfig] = None,
    install_signals: bool = True,
) -> AsyncIOMotorDatabase:
    return await get_connection_manager().initialize(config, install_signals)


async def connect(config: Optional[MongoDBConfig] = None) -> AsyncIOMotorDatabase:
    return await get_connection_manager().connect(config)


async def disconnect() -> None:
    await get_connection_manager().disconnect()


def is_connected() -> bool:
    return get_connection_manager().is_connected()


def get_connection_info() -> dict[str, Any]:
    return get_connection_manager().get_connection_info()


async def health_check() -> HealthCheckResult:
    return await get_connection_manager().health_check()


async def get_database() -> AsyncIOMotorDatabase:
    """Shared database handle, connecting on first use."""
    return await get_connection_manager().connect()
