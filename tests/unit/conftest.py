"""
Shared fixtures for unit tests.

Provides a configured accessory wired to a real command queue and router, plus a
recorder for the push notifications the services emit.
"""

from unittest.mock import AsyncMock

import pytest

from tasmota_thermostat.devices import TasmotaThermostat
from tasmota_thermostat.mqtt.command_routing import CommandRouter
from tasmota_thermostat.mqtt.commands import CommandProcessor
from tasmota_thermostat.structs import BridgeConfig, Characteristic

TOPIC_NAME = "thermo1"


class NotificationRecorder:
    """Collects (service, characteristic, value) tuples pushed by services."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Characteristic, object]] = []

    def observer_for(self, service_name: str):
        def _observer(characteristic: Characteristic, value: object) -> None:
            self.events.append((service_name, characteristic, value))

        return _observer

    @property
    def characteristics(self) -> list[Characteristic]:
        return [c for _, c, _ in self.events]


@pytest.fixture
def bridge_config():
    return BridgeConfig(name="Living Room", mqtt_url="mqtt://broker.local:1883", topic_name=TOPIC_NAME)


@pytest.fixture
def command_processor():
    return CommandProcessor()


@pytest.fixture
def accessory(bridge_config, command_processor):
    return TasmotaThermostat(bridge_config, command_processor)


@pytest.fixture
def notifications(accessory):
    recorder = NotificationRecorder()
    accessory.thermostat_service.subscribe(recorder.observer_for("thermostat"))
    accessory.switch_service.subscribe(recorder.observer_for("switch"))
    return recorder


@pytest.fixture
def router(accessory):
    return CommandRouter(accessory)


@pytest.fixture
def mock_publisher():
    """
    Mock publisher for the command queue.

    Returns an AsyncMock whose publish() reports success.
    """
    publisher = AsyncMock()
    publisher.publish = AsyncMock(return_value=True)
    return publisher
