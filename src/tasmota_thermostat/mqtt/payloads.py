"""Decoding and field extraction for inbound Tasmota payloads.

Payloads are loosely shaped JSON objects. Every field is looked up by path and
is optional; a field that is missing or falsy counts as absent and must leave
the model untouched.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any, TypeAlias

from tasmota_thermostat.const import POWER_ON
from tasmota_thermostat.exceptions import PayloadDecodeError
from tasmota_thermostat.logging_abstraction import get_logger
from tasmota_thermostat.structs import HeatingState

logger = get_logger(__name__)

JSONObject: TypeAlias = dict[str, Any]

HEAT_MODE = 1


def decode_payload(topic: str, payload: bytes) -> JSONObject:
    """Decode raw payload bytes into a JSON object.

    Raises:
        PayloadDecodeError: Payload is not UTF-8, not JSON, or not an object

    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise PayloadDecodeError(topic, payload, "not valid UTF-8") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PayloadDecodeError(topic, payload, f"bad JSON ({e.msg} at pos {e.pos})") from e
    if not isinstance(data, dict):
        raise PayloadDecodeError(topic, payload, f"expected a JSON object, got {type(data).__name__}")
    return data


def lookup(payload: Mapping[str, Any], *path: str) -> Any:
    """Walk nested objects; return None when any step is missing or not an object."""
    node: Any = payload
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def present(value: Any) -> bool:
    """Presence check used for every field: missing, null, 0, "" and false are absent."""
    return bool(value)


def as_number(value: Any, field: str) -> float | int | None:
    """Return a numeric field value, or None (with a warning) if it is not numeric."""
    if isinstance(value, bool):
        logger.warning("Ignoring non-numeric %s: %r", field, value)
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            pass
        else:
            if not math.isfinite(number):
                logger.warning("Ignoring non-numeric %s: %r", field, value)
                return None
            return int(number) if number.is_integer() and "." not in value else number
    logger.warning("Ignoring non-numeric %s: %r", field, value)
    return None


def power_to_bool(value: Any) -> bool:
    return value == POWER_ON


def mode_to_heating_state(value: Any) -> HeatingState:
    """Mode 1 is heating, anything else is off."""
    return HeatingState.HEAT if value == HEAT_MODE and not isinstance(value, bool) else HeatingState.OFF
