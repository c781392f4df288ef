"""Error taxonomy for the event stream client."""

import socket
from enum import Enum


class RelayErrorCode(str, Enum):
    E_NOT_CONNECTED = "E_NOT_CONNECTED"
    E_DNS_NOT_FOUND = "E_DNS_NOT_FOUND"
    E_CONNECTION_REFUSED = "E_CONNECTION_REFUSED"
    E_CONNECTION_FAILED = "E_CONNECTION_FAILED"
    E_SUBSCRIBE_FAILED = "E_SUBSCRIBE_FAILED"
    E_PUBLISH_FAILED = "E_PUBLISH_FAILED"
    E_SESSION_STOPPED = "E_SESSION_STOPPED"
    E_INVALID_STATE = "E_INVALID_STATE"

    def __str__(self) -> str:
        return self.value


class RelayError(Exception):
    """Base class for errors raised by the event stream client."""

    default_errcode = RelayErrorCode.E_CONNECTION_FAILED

    def __init__(self, errmesg: str, *, errcode: RelayErrorCode | None = None):
        super().__init__(errmesg)
        self.errcode = errcode or self.default_errcode
        self.errmesg = errmesg

    def __str__(self) -> str:
        return self.errmesg


class RelayConnectionError(RelayError):
    """The broker connection could not be established or was lost."""


class DnsNotFoundError(RelayConnectionError):
    default_errcode = RelayErrorCode.E_DNS_NOT_FOUND

    def __init__(self, host: str):
        super().__init__(f'FQDN of host "{host}" not found in DNS')
        self.host = host


class BrokerRefusedError(RelayConnectionError):
    default_errcode = RelayErrorCode.E_CONNECTION_REFUSED

    def __init__(self, address: str, port: int):
        super().__init__(
            f"MQTTS connection refused at address {address} and TCP port {port}"
        )
        self.address = address
        self.port = port


class SubscribeError(RelayError):
    default_errcode = RelayErrorCode.E_SUBSCRIBE_FAILED


class PublishError(RelayError):
    default_errcode = RelayErrorCode.E_PUBLISH_FAILED


class NotConnectedError(RelayError):
    default_errcode = RelayErrorCode.E_NOT_CONNECTED

    def __init__(self, errmesg: str = "not connected"):
        super().__init__(errmesg)


class SessionStoppedError(RelayError):
    default_errcode = RelayErrorCode.E_SESSION_STOPPED

    def __init__(self, errmesg: str = "session stopped"):
        super().__init__(errmesg)


class InvalidStateError(RelayError):
    default_errcode = RelayErrorCode.E_INVALID_STATE


def _exception_chain(exc: BaseException):
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_connection_error(exc: BaseException, host: str, port: int) -> RelayConnectionError:
    """Map a raw connect failure onto the relay connection error taxonomy.

    Transport libraries tend to re-raise socket errors wrapped in their own
    exception type, so the whole ``__cause__``/``__context__`` chain is searched.
    """
    if isinstance(exc, RelayConnectionError):
        return exc
    for item in _exception_chain(exc):
        if isinstance(item, socket.gaierror):
            return DnsNotFoundError(host)
        if isinstance(item, ConnectionRefusedError):
            return BrokerRefusedError(host, port)
    error = RelayConnectionError(str(exc) or type(exc).__name__)
    error.__cause__ = exc
    return error
