"""Service groups exposed to the host accessory framework.

A ``Service`` holds the get/set handlers of its characteristics and pushes
value changes to subscribed observers so the framework does not have to poll.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeAlias

from typing_extensions import override

from tasmota_thermostat.logging_abstraction import get_logger
from tasmota_thermostat.structs import Characteristic, CharacteristicObserver

logger = get_logger(__name__)

GetHandler: TypeAlias = Callable[[], object]
SetHandler: TypeAlias = Callable[[object], None]


class ServiceType(StrEnum):
    SWITCH = "Switch"
    THERMOSTAT = "Thermostat"


@dataclass
class CharacteristicHandlers:
    on_get: GetHandler | None = None
    on_set: SetHandler | None = None
    valid_values: frozenset[object] | None = None
    last_value: object = None


@dataclass
class Service:
    """One logical service (switch or thermostat) of an accessory."""

    service_type: ServiceType
    display_name: str
    _characteristics: dict[Characteristic, CharacteristicHandlers] = field(default_factory=dict)
    _observers: list[CharacteristicObserver] = field(default_factory=list)

    @property
    def lp(self) -> str:
        return f"{self.service_type}:{self.display_name}:"

    @property
    def characteristics(self) -> tuple[Characteristic, ...]:
        return tuple(self._characteristics)

    def register(
        self,
        characteristic: Characteristic,
        *,
        on_get: GetHandler | None = None,
        on_set: SetHandler | None = None,
        valid_values: Iterable[object] | None = None,
    ) -> Service:
        """Attach handlers for a characteristic. Returns self for chaining."""
        self._characteristics[characteristic] = CharacteristicHandlers(
            on_get=on_get,
            on_set=on_set,
            valid_values=frozenset(valid_values) if valid_values is not None else None,
        )
        return self

    def _handlers(self, characteristic: Characteristic) -> CharacteristicHandlers:
        try:
            return self._characteristics[characteristic]
        except KeyError:
            msg = f"{self.service_type} service has no characteristic {characteristic}"
            raise ValueError(msg) from None

    def is_writable(self, characteristic: Characteristic) -> bool:
        return self._handlers(characteristic).on_set is not None

    def valid_values(self, characteristic: Characteristic) -> frozenset[object] | None:
        return self._handlers(characteristic).valid_values

    def get_value(self, characteristic: Characteristic) -> object:
        """Framework read entry point."""
        handlers = self._handlers(characteristic)
        if handlers.on_get is None:
            return handlers.last_value
        return handlers.on_get()

    def set_value(self, characteristic: Characteristic, value: object) -> None:
        """Framework write entry point.

        Raises:
            ValueError: The characteristic is read-only or the value is not one of its valid values

        """
        handlers = self._handlers(characteristic)
        if handlers.on_set is None:
            msg = f"{characteristic} is read-only"
            raise ValueError(msg)
        if handlers.valid_values is not None and value not in handlers.valid_values:
            msg = f"{value!r} is not a valid value for {characteristic}"
            raise ValueError(msg)
        handlers.on_set(value)

    def subscribe(self, observer: CharacteristicObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: CharacteristicObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def update_characteristic(self, characteristic: Characteristic, value: object) -> None:
        """Push a new value to every observer, whether or not it changed."""
        handlers = self._handlers(characteristic)
        handlers.last_value = value
        for observer in list(self._observers):
            try:
                observer(characteristic, value)
            except Exception:
                logger.exception("%s observer failed for %s=%s", self.lp, characteristic, value)

    @override
    def __repr__(self) -> str:
        return f"<Service {self.service_type} '{self.display_name}' characteristics={len(self._characteristics)}>"
