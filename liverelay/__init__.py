"""LiVE relay event stream client (receiver side)."""

from liverelay.domain.relay.event_stream import EventStream
from liverelay.domain.relay.preauth import preauth
from liverelay.schemas import ConnectionState, EventStreamOptions, MessageScope

__all__ = [
    "ConnectionState",
    "EventStream",
    "EventStreamOptions",
    "MessageScope",
    "preauth",
]
