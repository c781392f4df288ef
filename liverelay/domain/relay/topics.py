"""Topic addressing for a LiVE relay channel.

Every channel has one outbound topic towards the sender side and two
inbound topics for receivers::

    stream/{channel}/sender              (outbound)
    stream/{channel}/receiver            (inbound, broadcast)
    stream/{channel}/receiver/{client}   (inbound, unicast)
"""

from dataclasses import dataclass

from liverelay.schemas import MessageScope

TOPIC_PREFIX = "stream"


def sender_topic(channel: str) -> str:
    return f"{TOPIC_PREFIX}/{channel}/sender"


def broadcast_topic(channel: str) -> str:
    return f"{TOPIC_PREFIX}/{channel}/receiver"


def unicast_topic(channel: str, client_id: str) -> str:
    return f"{broadcast_topic(channel)}/{client_id}"


def classify(topic: str, channel: str, client_id: str) -> MessageScope | None:
    """Return the scope of an inbound topic, or None when it is not one of ours."""
    if topic == unicast_topic(channel, client_id):
        return MessageScope.UNICAST
    if topic == broadcast_topic(channel):
        return MessageScope.BROADCAST
    return None


@dataclass(frozen=True)
class TopicAddress:
    sender: str
    broadcast: str
    unicast: str

    @classmethod
    def for_session(cls, channel: str, client_id: str) -> "TopicAddress":
        return cls(
            sender=sender_topic(channel),
            broadcast=broadcast_topic(channel),
            unicast=unicast_topic(channel, client_id),
        )

    @property
    def inbound(self) -> tuple[str, str]:
        return (self.broadcast, self.unicast)
