"""Tasmota thermostat accessory: a switch service plus a thermostat service.

Reads return the last cached value immediately and, as a side effect, ask the
device for a fresh one. The reply arrives later on the inbound path.
"""

from __future__ import annotations

from tasmota_thermostat.const import (
    POWER_OFF,
    POWER_ON,
    STATUS_SENSOR_ARG,
    VERB_POWER,
    VERB_STATUS,
    VERB_TEMP_TARGET_SET,
    VERB_THERMOSTAT_MODE_SET,
)
from tasmota_thermostat.logging_abstraction import get_logger
from tasmota_thermostat.mqtt.commands import CommandProcessor, build_command, format_number
from tasmota_thermostat.structs import (
    BridgeConfig,
    Characteristic,
    HeatingState,
    TemperatureDisplayUnits,
)

from .services import Service, ServiceType
from .state import DeviceState

logger = get_logger(__name__)


class TasmotaThermostat:
    """Accessory bridging one Tasmota thermostat."""

    lp: str = "TasmotaThermostat:"

    def __init__(self, config: BridgeConfig, commands: CommandProcessor, state: DeviceState | None = None) -> None:
        self.config: BridgeConfig = config
        self.name: str = config.name
        self.topic_name: str = config.topic_name
        self.commands: CommandProcessor = commands
        self.state: DeviceState = state if state is not None else DeviceState()
        self.lp = f"TasmotaThermostat:{self.name}:"

        self.thermostat_service: Service = Service(ServiceType.THERMOSTAT, self.name)
        _ = (
            self.thermostat_service.register(
                Characteristic.CURRENT_HEATING_STATE,
                on_get=self.handle_current_heating_state_get,
            )
            .register(
                Characteristic.TARGET_HEATING_STATE,
                on_get=self.handle_target_heating_state_get,
                on_set=self.handle_target_heating_state_set,
                valid_values=(HeatingState.OFF, HeatingState.HEAT),
            )
            .register(
                Characteristic.CURRENT_HUMIDITY,
                on_get=self.handle_current_humidity_get,
            )
            .register(
                Characteristic.CURRENT_TEMPERATURE,
                on_get=self.handle_current_temperature_get,
            )
            .register(
                Characteristic.TARGET_TEMPERATURE,
                on_get=self.handle_target_temperature_get,
                on_set=self.handle_target_temperature_set,
            )
            .register(
                Characteristic.TEMPERATURE_DISPLAY_UNITS,
                on_get=self.handle_temperature_display_units_get,
                on_set=self.handle_temperature_display_units_set,
            )
        )

        self.switch_service: Service = Service(ServiceType.SWITCH, self.name)
        _ = self.switch_service.register(
            Characteristic.ON,
            on_get=self.handle_switch_get,
            on_set=self.handle_switch_set,
        )

    def get_services(self) -> list[Service]:
        return [self.thermostat_service, self.switch_service]

    def _send(self, verb: str, payload: str = "") -> None:
        self.commands.enqueue(build_command(self.topic_name, verb, payload))

    # Switch

    def handle_switch_get(self) -> bool:
        logger.info(
            "%s Current state of the switch was returned: %s",
            self.lp,
            POWER_ON if self.state.switch_on else POWER_OFF,
        )
        self._send(VERB_POWER)
        return self.state.switch_on

    def handle_switch_set(self, value: object) -> None:
        self.state.switch_on = bool(value)
        power = POWER_ON if self.state.switch_on else POWER_OFF
        logger.info("%s Switch state was set to: %s", self.lp, power)
        self._send(VERB_POWER, power)

    # Thermostat

    def handle_current_heating_state_get(self) -> HeatingState:
        logger.info("%s Triggered GET %s", self.lp, Characteristic.CURRENT_HEATING_STATE)
        self._send(VERB_THERMOSTAT_MODE_SET)
        return self.state.current_heating_state

    def handle_target_heating_state_get(self) -> HeatingState:
        logger.info("%s Triggered GET %s", self.lp, Characteristic.TARGET_HEATING_STATE)
        self._send(VERB_THERMOSTAT_MODE_SET)
        return self.state.target_heating_state

    def handle_target_heating_state_set(self, value: object) -> None:
        logger.info("%s Triggered SET %s: %s", self.lp, Characteristic.TARGET_HEATING_STATE, value)
        mode = HeatingState(int(value))  # type: ignore[call-overload]
        self.state.set_heating_state(mode)
        self._send(VERB_THERMOSTAT_MODE_SET, "1" if mode is HeatingState.HEAT else "0")

    def handle_current_temperature_get(self) -> float:
        logger.info("%s Triggered GET %s", self.lp, Characteristic.CURRENT_TEMPERATURE)
        self._send(VERB_STATUS, STATUS_SENSOR_ARG)
        return self.state.current_temperature

    def handle_current_humidity_get(self) -> float:
        logger.info("%s Triggered GET %s", self.lp, Characteristic.CURRENT_HUMIDITY)
        self._send(VERB_STATUS, STATUS_SENSOR_ARG)
        return self.state.current_humidity

    def handle_target_temperature_get(self) -> float:
        logger.info("%s Triggered GET %s", self.lp, Characteristic.TARGET_TEMPERATURE)
        self._send(VERB_TEMP_TARGET_SET)
        return self.state.target_temperature

    def handle_target_temperature_set(self, value: object) -> None:
        logger.info("%s Triggered SET %s: %s", self.lp, Characteristic.TARGET_TEMPERATURE, value)
        temperature = float(value)  # type: ignore[arg-type]
        self.state.target_temperature = temperature
        self._send(VERB_TEMP_TARGET_SET, format_number(temperature))

    def handle_temperature_display_units_get(self) -> TemperatureDisplayUnits:
        logger.info("%s Triggered GET %s", self.lp, Characteristic.TEMPERATURE_DISPLAY_UNITS)
        return self.state.temperature_display_units

    def handle_temperature_display_units_set(self, value: object) -> None:
        # Accepted but not applied: the device has no units setting and no conversion is done.
        logger.info("%s Triggered SET %s: %s (ignored)", self.lp, Characteristic.TEMPERATURE_DISPLAY_UNITS, value)
