"""Bridge a Tasmota thermostat's MQTT telemetry to an accessory control model."""

__version__ = "0.3.0"
