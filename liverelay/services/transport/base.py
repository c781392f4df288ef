"""Broker connection contract.

The session layer only talks to brokers through this interface, which keeps
it independent of the MQTT client library in use.

A connection is created unopened, callers register handlers with ``on()``
and then call ``open()``. The connection emits:

- ``connect``: a (re)connection has been established
- ``reconnect``: a new connection attempt is about to start
- ``close``: a connection or connection attempt has ended
- ``disconnect``: an established connection was dropped by the broker side
- ``error(exc)``: a connection attempt or an established connection failed
- ``message(topic, payload)``: a message arrived on a subscribed topic
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from liverelay.shared.events import EventEmitter


class TransportError(Exception):
    """Base class for all transport-layer errors."""


@dataclass(frozen=True)
class LastWill:
    """Message the broker publishes on our behalf if the connection drops uncleanly."""

    topic: str
    payload: str
    qos: int = 2
    retain: bool = False


@dataclass(frozen=True)
class ConnectOptions:
    client_id: str
    reconnect_period: int = 1000
    """Fixed delay between reconnect attempts in ms; 0 disables reconnecting."""
    connect_timeout: int = 20 * 1000
    tls_insecure: bool = True
    will: LastWill | None = None
    clean_session: bool = True


class BrokerConnection(EventEmitter, ABC):
    """Minimal contract for a publish/subscribe broker connection."""

    def __init__(self, url: str, options: ConnectOptions) -> None:
        super().__init__()
        self.url = url
        self.options = options

    @abstractmethod
    def open(self) -> None:
        """Start connecting in the background; progress is reported through events."""

    @abstractmethod
    async def subscribe(self, topic: str, qos: int = 0) -> None:
        """Subscribe to ``topic``; raises TransportError on failure."""

    @abstractmethod
    async def publish(self, topic: str, payload: str | bytes, qos: int = 0) -> None:
        """Publish and wait for the QoS flow to complete; raises TransportError on failure."""

    @abstractmethod
    async def end(self) -> None:
        """Close the connection and stop reconnecting. Safe to call repeatedly."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether a broker connection is currently established."""

    @property
    @abstractmethod
    def endpoint(self) -> tuple[str, int]:
        """Broker (host, port) this connection targets."""


ConnectionFactory = Callable[[str, ConnectOptions], BrokerConnection]
