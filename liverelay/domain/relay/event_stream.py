"""Event stream session towards the LiVE relay broker (receiver side)."""

from __future__ import annotations

import asyncio
from typing import Any

import orjson

from liverelay.schemas import ConnectionState, EventStreamOptions, InboundMessage
from liverelay.services.transport import (
    BrokerConnection,
    ConnectionFactory,
    ConnectOptions,
    LastWill,
    MqttBrokerConnection,
    TransportError,
)
from liverelay.shared.events import EventEmitter
from liverelay.shared.log import SessionLog
from liverelay.utils.relay_errors import (
    InvalidStateError,
    NotConnectedError,
    PublishError,
    RelayError,
    SessionStoppedError,
    SubscribeError,
    classify_connection_error,
)

from . import preauth as preauth_probe
from .attendance import Heartbeat, begin_event, end_event, refresh_event
from .state_machine import ConnectionStateMachine
from .topics import TopicAddress, classify

# QoS 2: exactly-once delivery for attendance, application messages and the last will
SEND_QOS = 2
SUBSCRIBE_QOS = 0


def encode_message(message: Any) -> str:
    return orjson.dumps(message).decode("utf-8")


class EventStream(EventEmitter):
    """Receiver session on a LiVE relay channel.

    Owns exactly one broker connection and one attendance heartbeat. Emits:

    - ``reconnect``
    - ``disconnect(reason)`` with reason ``"close"`` or ``"disconnect"``
    - ``message(scope, payload)`` with scope ``"broadcast"`` or ``"unicast"``
    - ``error(detail)``
    - ``sent(text)``, ``send:success(text)``, ``send:error(detail)``

    A stopped session cannot be restarted; create a new instance instead.
    """

    def __init__(
        self,
        options: EventStreamOptions | None = None,
        *,
        connection_factory: ConnectionFactory | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__()
        self.options = options or EventStreamOptions(**kwargs)
        self.topics = TopicAddress.for_session(self.options.channel, self.options.client)
        self.url = self.options.url

        self._log = SessionLog(self.options.log)
        self._connection_factory = connection_factory or MqttBrokerConnection
        self._state = ConnectionState.IDLE
        self._connection: BrokerConnection | None = None
        self._heartbeat: Heartbeat | None = None
        self._pending_start: asyncio.Future[None] | None = None
        self._stopping = False

    @property
    def client_id(self) -> str:
        return self.options.client

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return (
            self._connection is not None
            and self._connection.connected
            and self._state is ConnectionState.CONNECTED
        )

    # ------------------------------------------------------------------
    # Lifecycle

    async def preauth(self) -> None:
        """Probe the broker once without touching this session's state."""
        await preauth_probe.preauth(
            self.url,
            self.client_id,
            connection_factory=self._connection_factory,
            connect_timeout=self.options.connect_timeout,
            log=self._log,
        )

    async def start(self) -> None:
        """Connect, subscribe and begin attendance.

        Returns once the first connection is fully set up. Fails fast with
        the classified connection error (or SubscribeError) if the first
        connect does not succeed; the session is then stopped.
        """
        if self._state is not ConnectionState.IDLE:
            raise InvalidStateError(f"cannot start event stream in state {self._state}")
        self._transition(ConnectionState.CONNECTING)

        self._pending_start = asyncio.get_running_loop().create_future()
        connection = self._connection_factory(
            self.url,
            ConnectOptions(
                client_id=self.client_id,
                reconnect_period=self.options.reconnect_period,
                connect_timeout=self.options.connect_timeout,
                tls_insecure=True,
                will=LastWill(
                    topic=self.topics.sender,
                    payload=encode_message(end_event(self.client_id)),
                    qos=SEND_QOS,
                ),
            ),
        )
        self._connection = connection
        connection.on("error", self._on_error)
        connection.on("connect", self._on_connect)
        connection.open()

        try:
            await self._pending_start
        except BaseException:
            await self._abort_start(connection)
            raise
        finally:
            self._pending_start = None

    async def stop(self) -> None:
        """End attendance and close the connection. Safe to call in any state."""
        if self._stopping or self._state in (ConnectionState.IDLE, ConnectionState.STOPPED):
            return
        self._stopping = True
        self._log("info", "eventstream: stop")

        heartbeat, self._heartbeat = self._heartbeat, None
        if heartbeat is not None:
            await heartbeat.cancel()

        connection = self._connection
        if connection is not None and connection.connected and self._is_online():
            # end attendance (explicitly)
            try:
                await self.send(end_event(self.client_id))
            except RelayError as exc:
                self._log("debug", f"eventstream: attendance end not delivered: {exc}")

        self._connection = None
        self._transition(ConnectionState.STOPPED)
        self._settle_start(SessionStoppedError("event stream stopped before start completed"))
        if connection is not None:
            connection.remove_all_listeners()
            await connection.end()

    # ------------------------------------------------------------------
    # Outbound

    async def send(self, message: Any) -> None:
        """Publish ``message`` as JSON on the sender topic.

        Raises:
            NotConnectedError: No live connection is held
            PublishError: The transport failed to deliver the message
        """
        connection = self._connection
        if connection is None or not self._is_online():
            raise NotConnectedError()

        text = encode_message(message)
        self.emit("sent", text)
        try:
            await connection.publish(self.topics.sender, text, qos=SEND_QOS)
        except TransportError as exc:
            self._log("error", f"eventstream: MQTT: publish: {exc}")
            self.emit("send:error", exc)
            raise PublishError(str(exc)) from exc
        self.emit("send:success", text)

    # ------------------------------------------------------------------
    # Transport callbacks

    async def _on_connect(self) -> None:
        if self._closing():
            return
        self._log("info", "eventstream: MQTT: connect")

        if ConnectionStateMachine.is_first_connect(self._state):
            await self._on_first_connect()
            return

        if self._state is ConnectionState.RECONNECTING:
            self._transition(ConnectionState.CONNECTED)
        try:
            await self._subscribe_inbound()
        except TransportError as exc:
            self._log("error", f"eventstream: MQTT: subscribe: {exc}")
            self.emit("error", f"subscribe: {exc}")
        await self._begin_attendance()

    async def _on_first_connect(self) -> None:
        connection = self._connection
        if connection is None:
            return
        connection.on("reconnect", self._on_reconnect)
        connection.on("close", self._on_close)
        connection.on("disconnect", self._on_disconnect)
        connection.on("message", self._on_message)

        try:
            await self._subscribe_inbound()
        except TransportError as exc:
            if self._closing():
                return
            self._log("error", f"eventstream: MQTT: subscribe: {exc}")
            self._settle_start(SubscribeError(f"subscribe: {exc}"))
            return
        if self._closing():
            return

        self._transition(ConnectionState.CONNECTED)

        # refresh attendance (regularly)
        self._heartbeat = Heartbeat(self.options.interval, self._refresh_attendance, self._log)
        self._heartbeat.arm()

        await self._begin_attendance()
        if self._closing():
            return
        self._settle_start(None)

    def _on_error(self, exc: BaseException) -> None:
        if self._closing():
            return
        self._log("error", f"eventstream: MQTT: {exc}")
        if self._state is ConnectionState.CONNECTING:
            connection = self._connection
            if connection is None:
                return
            host, port = connection.endpoint
            self._settle_start(classify_connection_error(exc, host, port))
            return
        self._mark_offline()
        self.emit("error", exc)

    def _on_reconnect(self) -> None:
        if self._closing():
            return
        self._log("info", "eventstream: MQTT: reconnect")
        self._mark_offline()
        self.emit("reconnect")

    def _on_close(self) -> None:
        if self._closing():
            return
        self._log("info", "eventstream: MQTT: close")
        self._mark_offline()
        self.emit("disconnect", "close")

    def _on_disconnect(self) -> None:
        if self._closing():
            return
        self._log("info", "eventstream: MQTT: disconnect")
        self._mark_offline()
        self.emit("disconnect", "disconnect")

    def _on_message(self, topic: str, payload: Any) -> None:
        if self._closing():
            return
        self._log("debug", f"eventstream: MQTT: message: topic={topic}")

        scope = classify(topic, self.options.channel, self.client_id)
        if scope is None:
            self._log("error", "eventstream: MQTT: message: invalid topic")
            self.emit("error", "message: invalid topic")
            return

        try:
            value = orjson.loads(payload)
        except (orjson.JSONDecodeError, TypeError) as exc:
            self._log("error", f"eventstream: MQTT: message: failed to parse JSON: {exc}")
            self.emit("error", f"message: failed to parse JSON: {exc}")
            return

        message = InboundMessage(scope=scope, payload=value)
        self.emit("message", message.scope, message.payload)

    # ------------------------------------------------------------------
    # Internal helpers

    async def _subscribe_inbound(self) -> None:
        connection = self._connection
        if connection is None:
            raise TransportError("not connected")
        for topic in self.topics.inbound:
            if self._closing():
                return
            await connection.subscribe(topic, qos=SUBSCRIBE_QOS)

    async def _begin_attendance(self) -> None:
        try:
            await self.send(begin_event(self.client_id, self.options.name, self.options.image))
        except RelayError as exc:
            if self._closing():
                return
            self.emit("error", f"attendance: {exc}")

    async def _refresh_attendance(self) -> None:
        connection = self._connection
        if connection is None or not connection.connected or not self._is_online():
            return
        await self.send(refresh_event(self.client_id))

    async def _abort_start(self, connection: BrokerConnection) -> None:
        if self._state is ConnectionState.STOPPED:
            return
        heartbeat, self._heartbeat = self._heartbeat, None
        if heartbeat is not None:
            await heartbeat.cancel()
        self._connection = None
        self._transition(ConnectionState.STOPPED)
        connection.remove_all_listeners()
        await connection.end()

    def _settle_start(self, error: BaseException | None) -> None:
        future = self._pending_start
        if future is None or future.done():
            return
        if error is None:
            future.set_result(None)
        else:
            future.set_exception(error)

    def _transition(self, new_state: ConnectionState) -> None:
        if new_state is self._state:
            return
        if not ConnectionStateMachine.can_transition(self._state, new_state):
            raise InvalidStateError(f"invalid state transition {self._state} -> {new_state}")
        self._log("debug", f"eventstream: state {self._state} -> {new_state}")
        self._state = new_state

    def _mark_offline(self) -> None:
        if self._state is ConnectionState.CONNECTED:
            self._transition(ConnectionState.RECONNECTING)

    def _is_online(self) -> bool:
        return self._state in ConnectionState.online_states()

    def _closing(self) -> bool:
        return self._stopping or self._state is ConnectionState.STOPPED
