from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import yaml

from tasmota_thermostat.exceptions import ConfigError
from tasmota_thermostat.logging_abstraction import get_logger
from tasmota_thermostat.structs import BridgeConfig

logger = get_logger(__name__)

MIN_PYTHON = (3, 12)


def check_python_version() -> None:
    if sys.version_info < MIN_PYTHON:
        logger.error(
            "Python %s.%s or newer is required, running %s",
            MIN_PYTHON[0],
            MIN_PYTHON[1],
            sys.version.split()[0],
        )
        sys.exit(1)


def load_config_file(config_file: Path) -> dict[str, Any]:
    """Read a YAML accessory config file.

    Raises:
        ConfigError: The file cannot be read, is not valid YAML, or is not a mapping

    """
    logger.debug("Parsing config file: %s", config_file)
    try:
        with config_file.open() as f:
            config_data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError("config_file", f"cannot read {config_file}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError("config_file", f"invalid YAML in {config_file}: {e}") from e
    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ConfigError("config_file", f"{config_file} must contain a mapping")
    return config_data


def build_config(config_file: Path | None) -> BridgeConfig:
    """Config from the YAML file when given, otherwise from the TASMOTA_* environment."""
    if config_file is None:
        return BridgeConfig.from_mapping(None)
    return BridgeConfig.from_mapping(load_config_file(config_file))
