from pydantic import BaseModel

from liverelay.config import config
from liverelay.schemas import EventStreamOptions
from liverelay.schemas.options import DEFAULT_HEARTBEAT_INTERVAL_MS, DEFAULT_RECONNECT_PERIOD_MS


def _int_setting(key: str, default: int) -> int:
    return int((config.get(key) or "").strip() or default)


class RelayEnvironConfig(BaseModel):
    DEBUG: bool = config.get("DEBUG", "false").strip().lower() == "true"  # type: ignore

    # Relay broker connection
    LIVE_RELAY_SERVER: str = config.get("LIVE_RELAY_SERVER", "").strip()  # type: ignore
    LIVE_RELAY_CHANNEL: str = config.get("LIVE_RELAY_CHANNEL", "").strip()  # type: ignore
    LIVE_RELAY_TOKEN1: str = config.get("LIVE_RELAY_TOKEN1", "").strip()  # type: ignore
    LIVE_RELAY_TOKEN2: str = config.get("LIVE_RELAY_TOKEN2", "").strip()  # type: ignore

    # Attendance display metadata
    LIVE_RELAY_CLIENT: str | None = (config.get("LIVE_RELAY_CLIENT") or "").strip() or None
    LIVE_RELAY_NAME: str = config.get("LIVE_RELAY_NAME", "").strip()  # type: ignore
    LIVE_RELAY_IMAGE: str = config.get("LIVE_RELAY_IMAGE", "").strip()  # type: ignore

    # Timing, in milliseconds
    LIVE_RELAY_INTERVAL_MS: int = _int_setting("LIVE_RELAY_INTERVAL_MS", DEFAULT_HEARTBEAT_INTERVAL_MS)
    LIVE_RELAY_RECONNECT_PERIOD_MS: int = _int_setting(
        "LIVE_RELAY_RECONNECT_PERIOD_MS", DEFAULT_RECONNECT_PERIOD_MS
    )

    def to_options(self, **overrides) -> EventStreamOptions:
        values = {
            "name": self.LIVE_RELAY_NAME,
            "image": self.LIVE_RELAY_IMAGE,
            "server": self.LIVE_RELAY_SERVER,
            "channel": self.LIVE_RELAY_CHANNEL,
            "token1": self.LIVE_RELAY_TOKEN1,
            "token2": self.LIVE_RELAY_TOKEN2,
            "interval": self.LIVE_RELAY_INTERVAL_MS,
            "reconnect_period": self.LIVE_RELAY_RECONNECT_PERIOD_MS,
        }
        if self.LIVE_RELAY_CLIENT:
            values["client"] = self.LIVE_RELAY_CLIENT
        values.update(overrides)
        return EventStreamOptions(**values)


_relay_environ_config = RelayEnvironConfig()


def get_relay_environ_config() -> RelayEnvironConfig:
    return _relay_environ_config
