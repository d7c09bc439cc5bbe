"""Shared types: enums, configuration model, and message containers."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Any, Protocol, TypeAlias
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel, ValidationError, field_validator

from tasmota_thermostat.const import TASMOTA_MQTT_URL, TASMOTA_NAME, TASMOTA_TOPIC_NAME
from tasmota_thermostat.exceptions import ConfigError

__all__ = [
    "BridgeConfig",
    "Characteristic",
    "CharacteristicObserver",
    "CommandPublisher",
    "HeatingState",
    "InboundMessage",
    "MqttBrokerInfo",
    "OutboundCommand",
    "TemperatureDisplayUnits",
]

_PLAIN_SCHEMES = ("mqtt", "tcp")
_TLS_SCHEMES = ("mqtts", "ssl")
DEFAULT_PORT = 1883
DEFAULT_TLS_PORT = 8883


def _env(key: str, default: str) -> str:
    """Re-read an env setting so values loaded from an env file after import still apply."""
    return os.environ.get(key) or default


class HeatingState(IntEnum):
    """Heating mode; values match the accessory protocol's heating/cooling state."""

    OFF = 0
    HEAT = 1


class TemperatureDisplayUnits(IntEnum):
    CELSIUS = 0
    FAHRENHEIT = 1


class Characteristic(StrEnum):
    """Properties exposed to the accessory framework."""

    ON = "On"
    CURRENT_HEATING_STATE = "CurrentHeatingCoolingState"
    TARGET_HEATING_STATE = "TargetHeatingCoolingState"
    CURRENT_TEMPERATURE = "CurrentTemperature"
    CURRENT_HUMIDITY = "CurrentRelativeHumidity"
    TARGET_TEMPERATURE = "TargetTemperature"
    TEMPERATURE_DISPLAY_UNITS = "TemperatureDisplayUnits"


CharacteristicObserver: TypeAlias = Callable[[Characteristic, object], None]


class CommandPublisher(Protocol):
    """Anything that can put a payload on a broker topic."""

    async def publish(self, topic: str, msg_data: bytes) -> bool: ...


@dataclass(frozen=True, slots=True)
class InboundMessage:
    topic: str
    payload: bytes


@dataclass(frozen=True, slots=True)
class OutboundCommand:
    """A command for the device: ``cmnd/<topic name>/<VERB>`` plus a string payload.

    An empty payload asks the device to report the current value.
    """

    topic: str
    payload: str = ""

    @property
    def is_query(self) -> bool:
        return self.payload == ""


@dataclass(frozen=True, slots=True)
class MqttBrokerInfo:
    """Connection details parsed from a broker URL such as ``mqtt://user:pw@host:1883``."""

    host: str
    port: int
    username: str | None = None
    password: str | None = None
    tls: bool = False

    @classmethod
    def from_url(cls, url: str) -> MqttBrokerInfo:
        parts = urlsplit(url.strip())
        scheme = parts.scheme.casefold()
        if scheme not in _PLAIN_SCHEMES + _TLS_SCHEMES:
            raise ConfigError("mqtt.url", f"unsupported scheme '{parts.scheme}' in {url!r}")
        if not parts.hostname:
            raise ConfigError("mqtt.url", f"no broker host in {url!r}")
        tls = scheme in _TLS_SCHEMES
        try:
            port = parts.port
        except ValueError as e:
            raise ConfigError("mqtt.url", f"bad port in {url!r}") from e
        return cls(
            host=parts.hostname,
            port=port or (DEFAULT_TLS_PORT if tls else DEFAULT_PORT),
            username=unquote(parts.username) if parts.username else None,
            password=unquote(parts.password) if parts.password else None,
            tls=tls,
        )


class BridgeConfig(BaseModel):
    """Accessory configuration: display name, broker URL and the device's topic segment."""

    name: str = TASMOTA_NAME
    mqtt_url: str = TASMOTA_MQTT_URL
    topic_name: str = TASMOTA_TOPIC_NAME

    @field_validator("topic_name")
    @classmethod
    def _check_topic_name(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value:
            msg = "topic name must not be empty"
            raise ValueError(msg)
        if any(c in value for c in "/#+"):
            msg = f"topic name '{value}' must be a single topic level without wildcards"
            raise ValueError(msg)
        return value

    @field_validator("mqtt_url")
    @classmethod
    def _check_mqtt_url(cls, value: str) -> str:
        try:
            _ = MqttBrokerInfo.from_url(value)
        except ConfigError as e:
            raise ValueError(e.reason) from e
        return value.strip()

    @property
    def broker(self) -> MqttBrokerInfo:
        return MqttBrokerInfo.from_url(self.mqtt_url)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> BridgeConfig:
        """Build from the accessory config shape.

        Expected layout::

            name: Living room
            mqtt:
              url: mqtt://broker.local:1883
              thermostat_topic_name: thermostat_1

        Missing or empty values fall back to the TASMOTA_* environment settings.
        """
        data = data or {}
        mqtt_raw = data.get("mqtt") or {}
        if not isinstance(mqtt_raw, Mapping):
            raise ConfigError("mqtt", "expected a mapping")
        try:
            return cls(
                name=str(data.get("name") or _env("TASMOTA_NAME", TASMOTA_NAME)),
                mqtt_url=str(mqtt_raw.get("url") or _env("TASMOTA_MQTT_URL", TASMOTA_MQTT_URL)),
                topic_name=str(mqtt_raw.get("thermostat_topic_name") or _env("TASMOTA_TOPIC_NAME", TASMOTA_TOPIC_NAME)),
            )
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(loc) for loc in first.get("loc", ())) or "config"
            raise ConfigError(field, str(first.get("msg", e))) from e
