"""Attendance protocol: envelope builders and the refresh heartbeat.

Attendance tells the sender side which receivers are present in a channel:

- ``begin`` is published on every (re)connect and carries name and image,
- ``refresh`` is published periodically while connected,
- ``end`` is published on stop() and is also registered as the connection's
  last will, so the broker announces it when the receiver drops uncleanly.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

from liverelay.schemas import AttendanceData, AttendanceEnvelope, AttendanceProfile
from liverelay.shared.log import SessionLog


def begin_event(client_id: str, name: str, image: str) -> dict:
    return AttendanceEnvelope(
        data=AttendanceData(
            client=client_id,
            event="begin",
            data=AttendanceProfile(name=name, image=image),
        )
    ).to_message()


def refresh_event(client_id: str) -> dict:
    return AttendanceEnvelope(data=AttendanceData(client=client_id, event="refresh")).to_message()


def end_event(client_id: str) -> dict:
    return AttendanceEnvelope(data=AttendanceData(client=client_id, event="end")).to_message()


class Heartbeat:
    """Periodic attendance refresh timer.

    ``tick`` is awaited once per ``interval_ms``. Any exception raised by a
    tick is logged at debug through ``log`` and dropped; the loop only ends
    through :meth:`cancel`.
    """

    def __init__(
        self,
        interval_ms: int,
        tick: Callable[[], Awaitable[None]],
        log: SessionLog | None = None,
    ) -> None:
        self._interval = interval_ms / 1000
        self._tick = tick
        self._log = log or SessionLog()
        self._task: asyncio.Task[None] | None = None

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._run(), name="attendance-heartbeat")

    async def cancel(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._tick()
            except Exception as exc:
                self._log("debug", f"eventstream: attendance refresh failed (ignored): {exc}")
