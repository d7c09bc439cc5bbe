"""In-memory state of one bridged thermostat."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from tasmota_thermostat.structs import HeatingState, TemperatureDisplayUnits


@dataclass
class DeviceState:
    """Last known values for the switch and thermostat of one device.

    Starts from defaults and only becomes authoritative once the device reports
    its own state. The two heating fields always move together: the device
    reports a single mode and is assumed to already be in it.
    """

    switch_on: bool = False
    current_heating_state: HeatingState = HeatingState.OFF
    target_heating_state: HeatingState = HeatingState.OFF
    current_temperature: float = 0
    current_humidity: float = 0
    target_temperature: float = 10
    # Never changed by inbound messages
    temperature_display_units: TemperatureDisplayUnits = TemperatureDisplayUnits.CELSIUS

    def set_heating_state(self, mode: HeatingState) -> None:
        """Write both heating fields with the same mode."""
        mode = HeatingState(mode)
        self.target_heating_state = mode
        self.current_heating_state = mode

    def snapshot(self) -> dict[str, object]:
        return asdict(self)
