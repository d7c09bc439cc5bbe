"""MQTT connection lifecycle for the Tasmota thermostat bridge.

Connects to the broker, subscribes to the device's topics on every
(re)connect, feeds inbound messages to the router, and publishes commands.
"""

from __future__ import annotations

import asyncio
import contextlib
import ssl
import uuid
from typing import TYPE_CHECKING

import aiomqtt

from tasmota_thermostat.const import TASMOTA_MQTT_CONN_DELAY
from tasmota_thermostat.logging_abstraction import get_logger

if TYPE_CHECKING:
    from tasmota_thermostat.structs import BridgeConfig, MqttBrokerInfo

    from .command_routing import CommandRouter

logger = get_logger(__name__)


class MQTTClient:
    """Broker connection for one bridged device."""

    lp: str = "mqtt:"

    def __init__(self, config: BridgeConfig, router: CommandRouter, identifier: str | None = None) -> None:
        self.config: BridgeConfig = config
        self.router: CommandRouter = router
        self.broker: MqttBrokerInfo = config.broker
        self.broker_client_id: str = identifier or f"tasmota_thermostat_{config.topic_name}_{uuid.uuid4().hex[:8]}"
        self.client: aiomqtt.Client | None = None
        self.start_task: asyncio.Task[None] | None = None
        self._connected: bool = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _build_client(self) -> aiomqtt.Client:
        return aiomqtt.Client(
            hostname=self.broker.host,
            port=self.broker.port,
            username=self.broker.username,
            password=self.broker.password,
            identifier=self.broker_client_id,
            tls_context=ssl.create_default_context() if self.broker.tls else None,
        )

    def _get_connection_delay(self, lp: str) -> int:
        """Reconnect delay, 5 seconds when configured as zero or negative."""
        delay = TASMOTA_MQTT_CONN_DELAY
        if delay <= 0:
            logger.debug("%s MQTT connection delay is <= 0, which is probably a typo, using 5...", lp)
            return 5
        return delay

    async def connect(self) -> bool:
        lp = f"{self.lp}connect:"
        self._connected = False
        logger.debug("%s Connecting to MQTT broker %s:%s...", lp, self.broker.host, self.broker.port)
        self.client = self._build_client()
        try:
            _ = await self.client.__aenter__()
        except aiomqtt.MqttError as mqtt_err_exc:
            if "code:134" in str(mqtt_err_exc):
                logger.error(
                    "%s Bad username or password, check your MQTT credentials (username: %s)",
                    lp,
                    self.broker.username,
                )
            else:
                logger.warning("%s Connection failed: %s", lp, mqtt_err_exc)
            return False
        self._connected = True
        logger.info("%s Connected to MQTT broker: %s port: %s", lp, self.broker.host, self.broker.port)
        return True

    async def subscribe_topics(self) -> list[str]:
        """Subscribe to each device topic individually; failures are logged and skipped."""
        assert self.client is not None, "client must be initialized"
        subscribed: list[str] = []
        for topic in self.router.topics():
            try:
                _ = await self.client.subscribe(topic, qos=0)
            except aiomqtt.MqttError as e:
                logger.error("%s MQTT subscription error for %s: %s", self.lp, topic, e)
            else:
                logger.info("%s MQTT subscribed: %s", self.lp, topic)
                subscribed.append(topic)
        return subscribed

    async def _start_receiver(self, lp: str) -> None:
        assert self.client is not None, "client must be initialized"
        _ = await self.subscribe_topics()
        logger.debug("%s Waiting for MQTT messages...", lp)
        try:
            await self.router.start_receiver_task(self.client.messages)
        except asyncio.CancelledError:
            logger.debug("%s MQTT receiver task cancelled, propagating...", lp)
            raise
        except aiomqtt.MqttError as msg_err:
            logger.warning("%s MQTT error: %s", lp, msg_err)
            raise

    async def _close_client(self) -> None:
        self._connected = False
        if self.client is None:
            return
        with contextlib.suppress(aiomqtt.MqttError):
            await self.client.__aexit__(None, None, None)

    async def start(self) -> None:
        """Connect, subscribe and receive; reconnect after a delay whenever the connection fails."""
        lp = f"{self.lp}start:"
        try:
            while True:
                if await self.connect():
                    try:
                        await self._start_receiver(lp)
                    except aiomqtt.MqttError:
                        await self._close_client()
                        continue
                    # message stream ended without an error; treat it as a disconnect
                    await self._close_client()
                    continue
                delay = self._get_connection_delay(lp)
                logger.info(
                    "%s connecting to MQTT broker failed, sleeping for %s seconds before re-trying...",
                    lp,
                    delay,
                )
                await asyncio.sleep(delay)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("%s MQTT start() EXCEPTION", lp)

    async def publish(self, topic: str, msg_data: bytes) -> bool:
        """Publish a message; returns False when disconnected or the broker rejects it."""
        lp = f"{self.lp}publish:"
        if not self._connected or self.client is None:
            logger.debug("%s not connected, dropping %s", lp, topic)
            return False
        try:
            await self.client.publish(topic, msg_data, qos=0, retain=False)
        except aiomqtt.MqttCodeError as mqtt_code_exc:
            logger.warning("%s [MqttCodeError] -> %s", lp, mqtt_code_exc)
            self._connected = False
        except aiomqtt.MqttError as mqtt_err:
            logger.warning("%s [MqttError] -> %s", lp, mqtt_err)
            self._connected = False
        else:
            return True
        return False

    async def stop(self) -> None:
        lp = f"{self.lp}stop:"
        try:
            if self._connected and self.client is not None:
                logger.debug("%s Disconnecting from broker...", lp)
                await self.client.__aexit__(None, None, None)
        except aiomqtt.MqttError as ce:
            logger.warning("%s MQTT disconnect failed: %s", lp, ce)
        else:
            logger.info("%s Disconnected from MQTT broker", lp)
        finally:
            self._connected = False
            if self.start_task and not self.start_task.done():
                logger.debug("%s Cancelling start task", lp)
                _ = self.start_task.cancel()
