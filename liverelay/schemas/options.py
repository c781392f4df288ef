"""Event stream options."""

from collections.abc import Callable

from pydantic import BaseModel, Field

from liverelay.domain.utils.idgen import new_client_id

LogCallback = Callable[[str, str], None]

DEFAULT_HEARTBEAT_INTERVAL_MS = 10 * 60 * 1000
DEFAULT_RECONNECT_PERIOD_MS = 1000
DEFAULT_CONNECT_TIMEOUT_MS = 20 * 1000


class EventStreamOptions(BaseModel):
    """Options accepted by :class:`~liverelay.domain.relay.event_stream.EventStream`."""

    client: str = Field(
        default_factory=new_client_id,
        description="Identity token of this receiver, unique per session object",
    )
    name: str = Field(default="", description="Display name announced with attendance begin")
    image: str = Field(default="", description="Display image announced with attendance begin")
    server: str = Field(default="", description="Broker address as host[:port]")
    channel: str = ""
    token1: str = ""
    token2: str = ""
    interval: int = Field(
        default=DEFAULT_HEARTBEAT_INTERVAL_MS,
        gt=0,
        description="Attendance refresh period in milliseconds",
    )
    reconnect_period: int = Field(
        default=DEFAULT_RECONNECT_PERIOD_MS,
        gt=0,
        description="Fixed delay between reconnect attempts in milliseconds",
    )
    connect_timeout: int = Field(
        default=DEFAULT_CONNECT_TIMEOUT_MS,
        gt=0,
        description="Upper bound for a single connect attempt in milliseconds",
    )
    log: LogCallback | None = Field(
        default=None,
        description="Optional log(level, message) callback; levels are error, info, debug",
    )

    @property
    def url(self) -> str:
        return f"mqtts://{self.token1}:{self.token2}@{self.server}"
