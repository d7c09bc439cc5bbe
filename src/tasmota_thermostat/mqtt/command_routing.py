"""Inbound MQTT routing.

Maps the four Tasmota topics of one device to the fields they carry:

    tele/<name>/STATE     POWER
    tele/<name>/SENSOR    BME280{Temperature,Humidity}, Thermostat0{ThermostatModeSet,TempTargetSet}
    stat/<name>/STATUS10  the SENSOR shape nested under StatusSNS
    stat/<name>/RESULT    POWER, ThermostatModeSet1, TempTargetSet1
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeAlias

from tasmota_thermostat.const import (
    KEY_STATUS_SNS,
    KEY_TEMP_TARGET_SET_1,
    KEY_THERMOSTAT_MODE_SET_1,
    STAT_PREFIX,
    SUFFIX_RESULT,
    SUFFIX_SENSOR,
    SUFFIX_STATE,
    SUFFIX_STATUS10,
    TELE_PREFIX,
)
from tasmota_thermostat.correlation import correlation_context
from tasmota_thermostat.exceptions import PayloadDecodeError
from tasmota_thermostat.logging_abstraction import get_logger

from .payloads import decode_payload, lookup
from .state_updates import StateUpdateHelper

if TYPE_CHECKING:
    from tasmota_thermostat.devices.thermostat import TasmotaThermostat

logger = get_logger(__name__)

TopicHandler: TypeAlias = Callable[[Mapping[str, Any]], int]


class CommandRouter:
    """Routes inbound messages for one device to the state update helper."""

    def __init__(self, accessory: TasmotaThermostat) -> None:
        self.accessory: TasmotaThermostat = accessory
        self.topic_name: str = accessory.topic_name
        self.state_updates: StateUpdateHelper = StateUpdateHelper(accessory)
        self.lp: str = f"mqtt:{self.topic_name}:"
        self._handlers: dict[str, TopicHandler] = {
            f"{TELE_PREFIX}/{self.topic_name}/{SUFFIX_STATE}": self._handle_state,
            f"{TELE_PREFIX}/{self.topic_name}/{SUFFIX_SENSOR}": self._handle_sensor,
            f"{STAT_PREFIX}/{self.topic_name}/{SUFFIX_STATUS10}": self._handle_status10,
            f"{STAT_PREFIX}/{self.topic_name}/{SUFFIX_RESULT}": self._handle_result,
        }

    def topics(self) -> list[str]:
        """Topics to subscribe to on every (re)connect."""
        return list(self._handlers)

    def _handle_state(self, payload: Mapping[str, Any]) -> int:
        return self.state_updates.apply_power_payload(payload)

    def _handle_sensor(self, payload: Mapping[str, Any]) -> int:
        return self.state_updates.apply_sensor_payload(payload)

    def _handle_status10(self, payload: Mapping[str, Any]) -> int:
        status_sns = lookup(payload, KEY_STATUS_SNS)
        if not status_sns or not isinstance(status_sns, Mapping):
            return 0
        return self.state_updates.apply_sensor_payload(status_sns)

    def _handle_result(self, payload: Mapping[str, Any]) -> int:
        updates = self.state_updates
        return (
            updates.apply_power_payload(payload)
            + updates.apply_mode(lookup(payload, KEY_THERMOSTAT_MODE_SET_1))
            + updates.apply_target_temperature(lookup(payload, KEY_TEMP_TARGET_SET_1), KEY_TEMP_TARGET_SET_1)
        )

    def handle_message(self, topic: str, payload: bytes | bytearray | str | None) -> int:
        """Decode and apply one inbound message.

        Returns:
            Number of characteristic notifications pushed (0 when the message was dropped)

        """
        lp = f"{self.lp}rcv:"
        if not payload:
            logger.debug("%s Received empty payload for topic: %s, skipping...", lp, topic)
            return 0
        raw = payload.encode() if isinstance(payload, str) else bytes(payload)
        logger.info("%s Topic: %s Message: %s", lp, topic, raw.decode("utf-8", errors="replace"))

        handler = self._handlers.get(topic)
        if handler is None:
            logger.debug("%s No handler for topic: %s, skipping...", lp, topic)
            return 0
        try:
            data = decode_payload(topic, raw)
        except PayloadDecodeError as e:
            logger.warning("%s Dropping message: %s", lp, e.reason, extra={"topic": topic})
            return 0

        notified = handler(data)
        if notified:
            logger.debug("%s %d update(s) from %s", lp, notified, topic, extra=self.accessory.state.snapshot())
        return notified

    async def start_receiver_task(self, messages: AsyncIterable[Any]) -> None:
        """Handle messages one at a time until the stream ends or errors."""
        lp = f"{self.lp}rcv:"
        async for message in messages:
            topic = message.topic.value if hasattr(message.topic, "value") else str(message.topic)
            with correlation_context():
                try:
                    _ = self.handle_message(topic, message.payload)
                except Exception:
                    logger.exception("%s Failed to handle message on %s", lp, topic)
