"""MQTT side of the bridge.

- client.py: broker connection lifecycle and publishing
- command_routing.py: inbound topic dispatch
- state_updates.py: applying decoded fields to the device state
- payloads.py: payload decoding and field extraction
- commands.py: outbound command queue
"""

from .client import MQTTClient
from .command_routing import CommandRouter
from .commands import CommandProcessor, build_command
from .state_updates import StateUpdateHelper

__all__ = [
    "CommandProcessor",
    "CommandRouter",
    "MQTTClient",
    "StateUpdateHelper",
    "build_command",
]
