"""Outbound command queue.

Accessory get/set handlers run synchronously and must return immediately, so
they only enqueue commands; ``CommandProcessor.start()`` publishes them in order.
Publishing is fire-and-forget: there is no acknowledgement tracking or retry.
"""

from __future__ import annotations

import asyncio

from tasmota_thermostat.const import CMND_PREFIX
from tasmota_thermostat.logging_abstraction import get_logger
from tasmota_thermostat.structs import CommandPublisher, OutboundCommand

logger = get_logger(__name__)


def build_command(topic_name: str, verb: str, payload: str = "") -> OutboundCommand:
    """Compose ``cmnd/<topic_name>/<verb>`` with the given payload."""
    return OutboundCommand(topic=f"{CMND_PREFIX}/{topic_name}/{verb}", payload=payload)


def format_number(value: float) -> str:
    """Render a number the way the device expects it: ``21`` not ``21.0``, ``21.5`` as is."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class CommandProcessor:
    """Queue of outbound commands drained by a single publisher task."""

    lp: str = "CommandProcessor:"

    def __init__(self) -> None:
        self._queue: asyncio.Queue[OutboundCommand] = asyncio.Queue()
        self.start_task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def enqueue(self, command: OutboundCommand) -> None:
        """Queue a command without blocking the caller."""
        logger.debug(
            "%s queued %s %s",
            self.lp,
            "query" if command.is_query else "command",
            command.topic,
            extra={"payload": command.payload},
        )
        self._queue.put_nowait(command)

    def drain(self) -> list[OutboundCommand]:
        """Remove and return everything still queued."""
        drained: list[OutboundCommand] = []
        while not self._queue.empty():
            drained.append(self._queue.get_nowait())
            self._queue.task_done()
        return drained

    async def publish_one(self, publisher: CommandPublisher, command: OutboundCommand) -> bool:
        lp = f"{self.lp}publish:"
        published = await publisher.publish(command.topic, command.payload.encode())
        if published:
            logger.debug("%s %s <- '%s'", lp, command.topic, command.payload)
        else:
            logger.warning("%s dropped %s <- '%s' (not published)", lp, command.topic, command.payload)
        return published

    async def start(self, publisher: CommandPublisher) -> None:
        """Publish queued commands until cancelled."""
        lp = f"{self.lp}start:"
        logger.debug("%s waiting for commands...", lp)
        while True:
            command = await self._queue.get()
            try:
                _ = await self.publish_one(publisher, command)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("%s failed to publish %s", lp, command.topic)
            finally:
                self._queue.task_done()
