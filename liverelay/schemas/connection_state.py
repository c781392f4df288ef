"""Common enums used across schemas."""

from enum import Enum


class ConnectionState(str, Enum):
    """Event stream connection lifecycle states.

    State Transition Flow:

    IDLE → CONNECTING → CONNECTED ⇄ RECONNECTING
      ↓        ↓            ↓            ↓
    STOPPED  STOPPED      STOPPED      STOPPED

    State Descriptions:
    - IDLE: Session object created, start() not called yet.
    - CONNECTING: start() called, waiting for the first broker connect.
    - CONNECTED: Broker connection established and subscriptions in place.
    - RECONNECTING: Connection lost after the first connect, transport retrying.
    - STOPPED: stop() called or the initial connect failed.

    Terminal states (no further transitions): STOPPED
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def online_states(cls) -> list["ConnectionState"]:
        """States in which the session holds a usable connection."""
        return [ConnectionState.CONNECTED, ConnectionState.RECONNECTING]


class MessageScope(str, Enum):
    """Addressing scope of an inbound message."""

    BROADCAST = "broadcast"
    UNICAST = "unicast"

    def __str__(self) -> str:
        return self.value


__all__ = ["ConnectionState", "MessageScope"]
