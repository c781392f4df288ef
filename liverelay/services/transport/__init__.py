from .base import BrokerConnection, ConnectionFactory, ConnectOptions, LastWill, TransportError
from .mqtt_transport import MqttBrokerConnection

__all__ = [
    "BrokerConnection",
    "ConnectOptions",
    "ConnectionFactory",
    "LastWill",
    "MqttBrokerConnection",
    "TransportError",
]
