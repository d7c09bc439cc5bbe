"""Device model and the accessory services built on it."""

from .services import Service, ServiceType
from .state import DeviceState
from .thermostat import TasmotaThermostat

__all__ = ["DeviceState", "Service", "ServiceType", "TasmotaThermostat"]
