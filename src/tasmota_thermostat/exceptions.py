"""Exception hierarchy for the Tasmota thermostat bridge."""

from __future__ import annotations


class TasmotaBridgeError(Exception):
    """Base class for bridge errors."""


class ConfigError(TasmotaBridgeError):
    """Accessory or broker configuration is invalid.

    Attributes:
        field: Name of the offending configuration field

    """

    def __init__(self, field: str, reason: str) -> None:
        self.field: str = field
        self.reason: str = reason
        super().__init__(f"Invalid config '{field}': {reason}")


class PayloadDecodeError(TasmotaBridgeError):
    """Inbound MQTT payload is not a JSON object.

    Raised when:
    - Payload bytes are not valid UTF-8
    - Payload text is not valid JSON
    - Payload decodes to something other than an object

    Attributes:
        topic: Topic the payload arrived on
        payload: Raw payload bytes

    """

    def __init__(self, topic: str, payload: bytes, reason: str) -> None:
        self.topic: str = topic
        self.payload: bytes = payload
        self.reason: str = reason
        super().__init__(f"Cannot decode payload on {topic}: {reason}")
