"""
Connection lifecycle events.

Driver monitoring callbacks (pymongo.monitoring) are translated into
ConnectionEvent values and handed to the ConnectionManager, which applies them
to its state and notifies observers. The observers registered here log each
event. A termination-signal handler drains the connection before exit.
"""
import asyncio
import signal
import sys
import threading
from typing import TYPE_CHECKING, Callable, Optional

from pymongo import monitoring

from app.core.logger import get_logger, log_error
from app.database.errors import DisconnectError
from app.database.state import ConnectionEvent

if TYPE_CHECKING:
    from app.database.connections import ConnectionManager

logger = get_logger("mongodb.events")

Dispatch = Callable[[ConnectionEvent, Optional[BaseException]], None]

# Running shutdown tasks; the loop only keeps weak references to tasks
_shutdown_tasks: set = set()


class DriverEventListener(monitoring.ServerListener, monitoring.ServerHeartbeatListener):
    """
    Translate server monitoring events into connection lifecycle events.

    The topology counts as connected while at least one server has a known
    type. Callbacks run on the driver's monitor threads, so the known-server
    set is guarded by a lock and events are handed to ``dispatch`` unchanged.
    """

    def __init__(self, dispatch: Dispatch):
        self._dispatch = dispatch
        self._lock = threading.Lock()
        self._known: set = set()
        self._has_connected = False

    def reset(self) -> None:
        """Forget previous topology state before a fresh connection run."""
        with self._lock:
            self._known.clear()
            self._has_connected = False

    # ServerListener

    def opened(self, event: monitoring.ServerOpeningEvent) -> None:
        pass

    def description_changed(self, event: monitoring.ServerDescriptionChangedEvent) -> None:
        was_known = event.previous_description.is_server_type_known
        is_known = event.new_description.is_server_type_known
        if was_known == is_known:
            return

        with self._lock:
            before = bool(self._known)
            if is_known:
                self._known.add(event.server_address)
            else:
                self._known.discard(event.server_address)
            after = bool(self._known)

            if before == after:
                return
            if after:
                lifecycle = (
                    ConnectionEvent.RECONNECTED if self._has_connected
                    else ConnectionEvent.CONNECTED
                )
                self._has_connected = True
            else:
                lifecycle = ConnectionEvent.DISCONNECTED

        self._dispatch(lifecycle, None)

    def closed(self, event: monitoring.ServerClosedEvent) -> None:
        with self._lock:
            if event.server_address not in self._known:
                return
            self._known.discard(event.server_address)
            if self._known:
                return
        self._dispatch(ConnectionEvent.DISCONNECTED, None)

    # ServerHeartbeatListener

    def started(self, event: monitoring.ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: monitoring.ServerHeartbeatSucceededEvent) -> None:
        pass

    def failed(self, event: monitoring.ServerHeartbeatFailedEvent) -> None:
        error = event.reply if isinstance(event.reply, BaseException) else None
        self._dispatch(ConnectionEvent.ERROR, error)


def log_lifecycle_event(event: ConnectionEvent, error: Optional[BaseException] = None) -> None:
    """Observer: write one log line per lifecycle event."""
    if event == ConnectionEvent.CONNECTED:
        logger.info("MongoDB connected")
    elif event == ConnectionEvent.ERROR:
        log_error(
            f"MongoDB connection error: {error}" if error else "MongoDB connection error",
            error,
        )
    elif event == ConnectionEvent.DISCONNECTED:
        logger.warning("MongoDB disconnected")
    elif event == ConnectionEvent.RECONNECTED:
        logger.info("MongoDB reconnected")


def register_event_listeners(manager: "ConnectionManager") -> DriverEventListener:
    """
    Attach the lifecycle observers to a manager.

    Idempotent: a manager keeps the listener from its first registration.
    Clients created afterwards are built with the listener attached.
    """
    if manager.driver_listener is not None:
        return manager.driver_listener

    listener = DriverEventListener(manager.dispatch_driver_event)
    manager.attach_driver_listener(listener)
    manager.add_observer(log_lifecycle_event)
    logger.debug("MongoDB event listeners registered")
    return listener


async def shutdown(
    manager: "ConnectionManager",
    sig: Optional[signal.Signals] = None,
    exit_func: Callable[[int], None] = sys.exit,
) -> None:
    """Disconnect and terminate the process (status 0, or 1 on failure)."""
    if sig is not None:
        logger.info(f"Received signal {sig.name}, closing MongoDB connection")

    try:
        await manager.disconnect()
    except DisconnectError as e:
        log_error("Error during MongoDB shutdown", e)
        exit_func(1)
        return

    logger.info("MongoDB connection closed through app termination")
    exit_func(0)


def install_signal_handlers(
    manager: "ConnectionManager",
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> bool:
    """
    Drain the connection on SIGINT/SIGTERM.

    Returns False when the loop does not support signal handlers (for
    example outside the main thread).
    """
    loop = loop or asyncio.get_running_loop()

    def handler(sig: signal.Signals) -> None:
        task = asyncio.ensure_future(shutdown(manager, sig))
        _shutdown_tasks.add(task)
        task.add_done_callback(_shutdown_tasks.discard)

    try:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: handler(s))
    except (NotImplementedError, RuntimeError, ValueError) as e:
        logger.warning(f"Signal handlers not installed: {e}")
        return False
    return True
