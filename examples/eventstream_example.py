"""Example: Join a LiVE relay channel as a receiver.

This script pre-authenticates at the relay broker, starts an event stream
session, prints every inbound message, and ends attendance on Ctrl+C.

Prerequisites:
    1. Install dependencies: uv sync
    2. Set environment variables in env.local (do not commit):
       LIVE_RELAY_SERVER=<relay-host>:8883
       LIVE_RELAY_CHANNEL=<channel>
       LIVE_RELAY_TOKEN1=PLACEHOLDER_TOKEN1
       LIVE_RELAY_TOKEN2=PLACEHOLDER_TOKEN2

Run:
    uv run python examples/eventstream_example.py
"""

import asyncio
import contextlib

from loguru import logger

from liverelay import EventStream
from liverelay.app_config import get_relay_environ_config
from liverelay.shared.log import init_logger
from liverelay.utils.relay_errors import RelayError


async def main():
    init_logger()
    settings = get_relay_environ_config()
    stream = EventStream(settings.to_options())

    print("LiVE Relay Event Stream Example")
    print("=" * 50)
    print(f"Client:   {stream.client_id}")
    print(f"Sender:   {stream.topics.sender}")
    print(f"Receiver: {stream.topics.broadcast}, {stream.topics.unicast}")

    stream.on("message", lambda scope, payload: print(f"[{scope}] {payload}"))
    stream.on("disconnect", lambda reason: print(f"disconnected ({reason})"))
    stream.on("reconnect", lambda: print("reconnecting..."))
    stream.on("error", lambda detail: print(f"error: {detail}"))

    try:
        await stream.preauth()
        await stream.start()
    except RelayError as e:
        logger.error(f"Failed to join channel: {e}")
        return

    print("\nJoined. Press Ctrl+C to leave.")
    try:
        await asyncio.Event().wait()
    finally:
        await stream.stop()
        print("Attendance ended.")


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())
