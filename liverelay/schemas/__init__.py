"""Pydantic schemas and enums shared across the event stream client."""

from .attendance import AttendanceData, AttendanceEnvelope, AttendanceProfile, AttendanceTag
from .connection_state import ConnectionState, MessageScope
from .message import InboundMessage
from .options import EventStreamOptions, LogCallback

__all__ = [
    "AttendanceData",
    "AttendanceEnvelope",
    "AttendanceProfile",
    "AttendanceTag",
    "ConnectionState",
    "EventStreamOptions",
    "InboundMessage",
    "LogCallback",
    "MessageScope",
]
