"""Inbound message schema."""

from typing import Any

from pydantic import BaseModel

from .connection_state import MessageScope


class InboundMessage(BaseModel):
    """A decoded message received on one of the receiver topics."""

    scope: MessageScope
    payload: Any
