"""Apply fields from inbound payloads to the device state.

Every applied field is written to ``DeviceState`` and then pushed to the owning
service right away, even when the value did not change. Absent fields are
skipped without touching the state.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from tasmota_thermostat.const import (
    KEY_BME280,
    KEY_HUMIDITY,
    KEY_POWER,
    KEY_TEMP_TARGET_SET,
    KEY_TEMPERATURE,
    KEY_THERMOSTAT_0,
    KEY_THERMOSTAT_MODE_SET,
)
from tasmota_thermostat.logging_abstraction import get_logger
from tasmota_thermostat.structs import Characteristic

from .payloads import as_number, lookup, mode_to_heating_state, power_to_bool, present

if TYPE_CHECKING:
    from tasmota_thermostat.devices.thermostat import TasmotaThermostat

logger = get_logger(__name__)


class StateUpdateHelper:
    """Writes decoded fields into the accessory's state and notifies its services."""

    def __init__(self, accessory: TasmotaThermostat) -> None:
        self.accessory: TasmotaThermostat = accessory
        self.lp: str = f"{accessory.lp}state:"

    def apply_power(self, value: Any) -> int:
        if not present(value):
            return 0
        state = self.accessory.state
        state.switch_on = power_to_bool(value)
        logger.debug("%s switch -> %s", self.lp, state.switch_on)
        self.accessory.switch_service.update_characteristic(Characteristic.ON, state.switch_on)
        return 1

    def apply_mode(self, value: Any) -> int:
        if not present(value):
            return 0
        state = self.accessory.state
        state.set_heating_state(mode_to_heating_state(value))
        logger.debug("%s heating state -> %s (mode=%r)", self.lp, state.target_heating_state.name, value)
        service = self.accessory.thermostat_service
        service.update_characteristic(Characteristic.TARGET_HEATING_STATE, state.target_heating_state)
        service.update_characteristic(Characteristic.CURRENT_HEATING_STATE, state.current_heating_state)
        return 2

    def apply_target_temperature(self, value: Any, field: str = KEY_TEMP_TARGET_SET) -> int:
        if not present(value):
            return 0
        temperature = as_number(value, field)
        if temperature is None:
            return 0
        self.accessory.state.target_temperature = temperature
        logger.debug("%s target temperature -> %s", self.lp, temperature)
        self.accessory.thermostat_service.update_characteristic(Characteristic.TARGET_TEMPERATURE, temperature)
        return 1

    def apply_current_temperature(self, value: Any) -> int:
        if not present(value):
            return 0
        temperature = as_number(value, KEY_TEMPERATURE)
        if temperature is None:
            return 0
        self.accessory.state.current_temperature = temperature
        logger.debug("%s current temperature -> %s", self.lp, temperature)
        self.accessory.thermostat_service.update_characteristic(Characteristic.CURRENT_TEMPERATURE, temperature)
        return 1

    def apply_humidity(self, value: Any) -> int:
        if not present(value):
            return 0
        humidity = as_number(value, KEY_HUMIDITY)
        if humidity is None:
            return 0
        self.accessory.state.current_humidity = humidity
        logger.debug("%s humidity -> %s", self.lp, humidity)
        self.accessory.thermostat_service.update_characteristic(Characteristic.CURRENT_HUMIDITY, humidity)
        return 1

    def apply_sensor_block(self, block: Any) -> int:
        """Temperature and humidity from a ``BME280`` object."""
        if not present(block) or not isinstance(block, Mapping):
            return 0
        return self.apply_current_temperature(lookup(block, KEY_TEMPERATURE)) + self.apply_humidity(
            lookup(block, KEY_HUMIDITY),
        )

    def apply_thermostat_block(self, block: Any) -> int:
        """Mode and target temperature from a ``Thermostat0`` object."""
        if not present(block) or not isinstance(block, Mapping):
            return 0
        return self.apply_mode(lookup(block, KEY_THERMOSTAT_MODE_SET)) + self.apply_target_temperature(
            lookup(block, KEY_TEMP_TARGET_SET),
        )

    def apply_sensor_payload(self, payload: Mapping[str, Any]) -> int:
        """Sensor and thermostat blocks as found in SENSOR telemetry and under ``StatusSNS``."""
        return self.apply_sensor_block(lookup(payload, KEY_BME280)) + self.apply_thermostat_block(
            lookup(payload, KEY_THERMOSTAT_0),
        )

    def apply_power_payload(self, payload: Mapping[str, Any]) -> int:
        return self.apply_power(lookup(payload, KEY_POWER))
