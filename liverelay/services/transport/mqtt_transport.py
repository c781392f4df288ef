"""aiomqtt-backed broker connection with fixed-period automatic reconnect."""

from __future__ import annotations

import asyncio
import contextlib
import ssl
from urllib.parse import unquote, urlparse

import aiomqtt
from loguru import logger

from .base import BrokerConnection, ConnectOptions, TransportError

DEFAULT_PORTS = {"mqtt": 1883, "mqtts": 8883}


class MqttBrokerConnection(BrokerConnection):
    """Keeps one MQTT session alive, reconnecting every ``reconnect_period`` ms.

    Each attempt builds a fresh ``aiomqtt.Client``; the connection object
    itself stays the same for the caller across reconnects. There is no
    backoff growth and no attempt cap.
    """

    def __init__(self, url: str, options: ConnectOptions) -> None:
        super().__init__(url, options)
        parsed = urlparse(url)
        if parsed.scheme not in DEFAULT_PORTS:
            raise ValueError(f"Invalid MQTT URL scheme: {parsed.scheme!r}")
        self._tls = parsed.scheme == "mqtts"
        self._hostname = parsed.hostname or "localhost"
        self._port = parsed.port or DEFAULT_PORTS[parsed.scheme]
        self._username = unquote(parsed.username) if parsed.username else None
        self._password = unquote(parsed.password) if parsed.password else None

        self._client: aiomqtt.Client | None = None
        self._task: asyncio.Task[None] | None = None
        self._ending = False

    @property
    def endpoint(self) -> tuple[str, int]:
        return (self._hostname, self._port)

    @property
    def connected(self) -> bool:
        return self._client is not None and not self._ending

    def open(self) -> None:
        if self._task is not None or self._ending:
            return
        self._task = asyncio.create_task(
            self._run(), name=f"mqtt-connection-{self.options.client_id}"
        )

    async def subscribe(self, topic: str, qos: int = 0) -> None:
        client = self._require_client()
        try:
            granted = await client.subscribe(topic, qos=qos)
        except aiomqtt.MqttError as exc:
            raise TransportError(f"subscribe {topic}: {exc}") from exc
        if any(getattr(code, "is_failure", code == 128) for code in granted or ()):
            raise TransportError(f"subscribe {topic}: rejected by broker")

    async def publish(self, topic: str, payload: str | bytes, qos: int = 0) -> None:
        client = self._require_client()
        try:
            await client.publish(topic, payload, qos=qos)
        except aiomqtt.MqttError as exc:
            raise TransportError(f"publish {topic}: {exc}") from exc

    async def end(self) -> None:
        self._ending = True
        task, self._task = self._task, None
        if task is None or task.done():
            return
        if task is asyncio.current_task():
            # Called from one of our own event handlers; the loop sees _ending and exits.
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def _require_client(self) -> aiomqtt.Client:
        if self._client is None:
            raise TransportError("not connected")
        return self._client

    def _build_client(self) -> aiomqtt.Client:
        will = None
        if self.options.will is not None:
            will = aiomqtt.Will(
                topic=self.options.will.topic,
                payload=self.options.will.payload,
                qos=self.options.will.qos,
                retain=self.options.will.retain,
            )

        tls_context = None
        if self._tls:
            tls_context = ssl.create_default_context()
            if self.options.tls_insecure:
                tls_context.check_hostname = False
                tls_context.verify_mode = ssl.CERT_NONE

        return aiomqtt.Client(
            hostname=self._hostname,
            port=self._port,
            username=self._username,
            password=self._password,
            identifier=self.options.client_id,
            will=will,
            clean_session=self.options.clean_session,
            timeout=self.options.connect_timeout / 1000,
            tls_context=tls_context,
            tls_insecure=self.options.tls_insecure if self._tls else None,
        )

    async def _run(self) -> None:
        attempt = 0
        while not self._ending:
            if attempt:
                await self.emit_async("reconnect")
            attempt += 1
            await self._run_once()
            await self.emit_async("close")
            if self._ending or self.options.reconnect_period <= 0:
                break
            await asyncio.sleep(self.options.reconnect_period / 1000)
        logger.debug(f"MQTT connection loop finished: {self._hostname}:{self._port}")

    async def _run_once(self) -> None:
        client = self._build_client()
        established = False
        try:
            async with client:
                self._client = client
                established = True
                logger.debug(f"MQTT connected: {self._hostname}:{self._port}")
                await self.emit_async("connect")
                if self._ending:
                    return
                async for message in client.messages:
                    await self.emit_async("message", message.topic.value, message.payload)
                    if self._ending:
                        return
        except aiomqtt.MqttError as exc:
            if self._ending:
                return
            await self.emit_async("error", exc)
            if established:
                await self.emit_async("disconnect")
        finally:
            self._client = None
