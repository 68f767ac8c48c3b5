"""
Connection state shared by the manager and the driver event listeners.

Every mutation goes through ConnectionState.apply so that connect/disconnect
calls and asynchronous driver callbacks follow one transition table.
"""
from dataclasses import dataclass
from enum import Enum, IntEnum


class ReadyState(IntEnum):
    """Self-reported status of a connection handle."""
    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3


class ConnectionEvent(str, Enum):
    """Lifecycle events, from the manager or from driver monitoring."""
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CONNECT_FAILED = "connect_failed"
    DISCONNECTING = "disconnecting"
    DISCONNECT_FAILED = "disconnect_failed"
    DISCONNECTED = "disconnected"
    RECONNECTED = "reconnected"
    ERROR = "error"


@dataclass
class ConnectionState:
    """Flags tracked for the process-wide connection."""
    is_connected: bool = False
    is_connecting: bool = False
    is_disconnecting: bool = False

    def apply(self, event: ConnectionEvent) -> None:
        """Apply a lifecycle event to the flags."""
        if event == ConnectionEvent.CONNECTING:
            self.is_connecting = True
        elif event in (ConnectionEvent.CONNECTED, ConnectionEvent.RECONNECTED):
            self.is_connected = True
            self.is_connecting = False
        elif event == ConnectionEvent.CONNECT_FAILED:
            self.is_connected = False
            self.is_connecting = False
        elif event == ConnectionEvent.DISCONNECTING:
            self.is_disconnecting = True
        elif event == ConnectionEvent.DISCONNECT_FAILED:
            self.is_disconnecting = False
        elif event == ConnectionEvent.DISCONNECTED:
            self.is_connected = False
            self.is_disconnecting = False
        # ERROR leaves the flags alone; the driver reports the server as
        # Unknown right after a failed heartbeat, which emits DISCONNECTED.
