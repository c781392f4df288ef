"""Attendance envelope schemas exchanged with the LiVE sender side."""

from typing import Literal

from pydantic import BaseModel

AttendanceTag = Literal["begin", "refresh", "end"]


class AttendanceProfile(BaseModel):
    """Display metadata announced with an attendance begin event."""

    name: str = ""
    image: str = ""


class AttendanceData(BaseModel):
    client: str
    event: AttendanceTag
    data: AttendanceProfile | None = None


class AttendanceEnvelope(BaseModel):
    """Envelope wrapping every attendance event.

    Example:
        {"id": "live-sender", "event": "attendance",
         "data": {"client": "c1", "event": "refresh"}}
    """

    id: Literal["live-sender"] = "live-sender"
    event: Literal["attendance"] = "attendance"
    data: AttendanceData

    def to_message(self) -> dict:
        """Plain dict ready for JSON serialization (omits absent payload)."""
        return self.model_dump(exclude_none=True)
