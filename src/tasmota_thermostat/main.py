from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

import dotenv
import uvloop

from tasmota_thermostat.const import (
    COMMAND_PROCESSOR_TASK_NAME,
    MQTT_CLIENT_START_TASK_NAME,
    TASMOTA_CONFIG_FILE_PATH,
    TASMOTA_DEBUG,
    TASMOTA_VERSION,
)
from tasmota_thermostat.correlation import correlation_context
from tasmota_thermostat.devices import TasmotaThermostat
from tasmota_thermostat.exceptions import ConfigError
from tasmota_thermostat.logging_abstraction import get_logger
from tasmota_thermostat.mqtt import CommandProcessor, CommandRouter, MQTTClient
from tasmota_thermostat.structs import BridgeConfig
from tasmota_thermostat.utils import build_config, check_python_version

logger = get_logger(__name__)

# Suppress verbose MQTT library warnings
mqtt_logger = logging.getLogger("mqtt")
mqtt_logger.setLevel(logging.ERROR)
mqtt_logger.propagate = False


class TasmotaBridge:
    """Wires the accessory, router, MQTT client and command queue for one device."""

    lp: str = "TasmotaBridge:"

    def __init__(self, config: BridgeConfig) -> None:
        self.config: BridgeConfig = config
        self.commands: CommandProcessor = CommandProcessor()
        self.accessory: TasmotaThermostat = TasmotaThermostat(config, self.commands)
        self.router: CommandRouter = CommandRouter(self.accessory)
        self.mqtt_client: MQTTClient = MQTTClient(config, self.router)
        self.tasks: list[asyncio.Task[None]] = []

    async def start(self) -> None:
        """Run the MQTT client and the command publisher until stopped."""
        logger.info(
            "%s Starting bridge",
            self.lp,
            extra={"name": self.config.name, "topic": self.config.topic_name, "broker": self.mqtt_client.broker.host},
        )
        self.mqtt_client.start_task = m_start = asyncio.Task(self.mqtt_client.start(), name=MQTT_CLIENT_START_TASK_NAME)
        self.commands.start_task = c_start = asyncio.Task(
            self.commands.start(self.mqtt_client),
            name=COMMAND_PROCESSOR_TASK_NAME,
        )
        self.tasks = [m_start, c_start]
        results = await asyncio.gather(*self.tasks, return_exceptions=True)
        for task, result in zip(self.tasks, results, strict=True):
            if isinstance(result, Exception) and not isinstance(result, asyncio.CancelledError):
                logger.error("%s task %s ended with error: %s", self.lp, task.get_name(), result)

    async def stop(self) -> None:
        logger.info("%s Shutting down...", self.lp)
        await self.mqtt_client.stop()
        for task in self.tasks:
            if not task.done():
                logger.debug("%s Cancelling task: %s", self.lp, task.get_name())
                _ = task.cancel()


def parse_cli(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Tasmota thermostat MQTT bridge")
    _ = parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML accessory config",
        default=Path(TASMOTA_CONFIG_FILE_PATH) if TASMOTA_CONFIG_FILE_PATH else None,
        type=Path,
    )
    _ = parser.add_argument("--env", help="Path to the environment file", default=None, type=Path)
    _ = parser.add_argument("-D", "--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args(argv)

    if args.debug:
        logger.set_level(logging.DEBUG)
        logger.info("Debug mode enabled via CLI argument")

    if args.env:
        env_path = args.env.expanduser().resolve()
        if not env_path.exists():
            logger.error("Environment file not found", extra={"path": str(env_path)})
        elif dotenv.load_dotenv(env_path, override=True):
            logger.info("Environment variables loaded", extra={"source": str(env_path)})
        else:
            logger.warning("No environment variables loaded from file", extra={"path": str(env_path)})
    return args


async def run_bridge(bridge: TasmotaBridge) -> None:
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, lambda s=signum: _on_signal(bridge, s))
    await bridge.start()


def _on_signal(bridge: TasmotaBridge, signum: int) -> None:
    logger.info("Intercepted signal: %s (%s)", signal.Signals(signum).name, signum)
    _ = asyncio.get_running_loop().create_task(bridge.stop())


def main(argv: list[str] | None = None) -> int:
    """Console entry point."""
    with correlation_context():
        logger.info("Starting Tasmota thermostat bridge", extra={"version": TASMOTA_VERSION})
        args = parse_cli(argv)
        if TASMOTA_DEBUG:
            logger.set_level(logging.DEBUG)
        check_python_version()

        config_file = args.config.expanduser().resolve() if args.config else None
        try:
            config = build_config(config_file)
        except ConfigError:
            logger.exception("Invalid configuration", extra={"config_path": str(config_file)})
            return 1

        bridge = TasmotaBridge(config)
        try:
            uvloop.run(run_bridge(bridge))
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received, shutting down...")
        except Exception as e:
            logger.exception("Fatal error in main loop", extra={"error": str(e)})
            return 1
        logger.info("Tasmota thermostat bridge shutdown complete")
        return 0


if __name__ == "__main__":
    sys.exit(main())
