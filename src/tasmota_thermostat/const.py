import os

from tasmota_thermostat import __version__

__all__ = [
    "CMND_PREFIX",
    "KEY_BME280",
    "KEY_HUMIDITY",
    "KEY_POWER",
    "KEY_STATUS_SNS",
    "KEY_TEMPERATURE",
    "KEY_TEMP_TARGET_SET",
    "KEY_TEMP_TARGET_SET_1",
    "KEY_THERMOSTAT_0",
    "KEY_THERMOSTAT_MODE_SET",
    "KEY_THERMOSTAT_MODE_SET_1",
    "MQTT_CLIENT_START_TASK_NAME",
    "COMMAND_PROCESSOR_TASK_NAME",
    "POWER_OFF",
    "POWER_ON",
    "STAT_PREFIX",
    "STATUS_SENSOR_ARG",
    "SUFFIX_RESULT",
    "SUFFIX_SENSOR",
    "SUFFIX_STATE",
    "SUFFIX_STATUS10",
    "TASMOTA_CONFIG_FILE_PATH",
    "TASMOTA_DEBUG",
    "TASMOTA_LOG_FORMAT",
    "TASMOTA_LOG_HUMAN_OUTPUT",
    "TASMOTA_LOG_JSON_FILE",
    "TASMOTA_MQTT_CONN_DELAY",
    "TASMOTA_MQTT_URL",
    "TASMOTA_NAME",
    "TASMOTA_TOPIC_NAME",
    "TASMOTA_VERSION",
    "TELE_PREFIX",
    "VERB_POWER",
    "VERB_STATUS",
    "VERB_TEMP_TARGET_SET",
    "VERB_THERMOSTAT_MODE_SET",
    "YES_ANSWER",
]

YES_ANSWER = ("true", "1", "yes", "y", "t", 1, "on", "o")
TASMOTA_VERSION: str = __version__

TASMOTA_NAME: str = os.environ.get("TASMOTA_NAME", "Thermostat")
TASMOTA_MQTT_URL: str = os.environ.get("TASMOTA_MQTT_URL", "mqtt://localhost:1883")
TASMOTA_TOPIC_NAME: str = os.environ.get("TASMOTA_TOPIC_NAME", "tasmota")
_config_path = os.environ.get("TASMOTA_CONFIG_FILE_PATH")
TASMOTA_CONFIG_FILE_PATH: str | None = _config_path if _config_path else None

_conn_delay = os.environ.get("TASMOTA_MQTT_CONN_DELAY", "10")
try:
    _conn_delay_value: int = int(_conn_delay) if _conn_delay else 10
except ValueError:
    _conn_delay_value = 10
TASMOTA_MQTT_CONN_DELAY: int = _conn_delay_value

TASMOTA_DEBUG: bool = os.environ.get("TASMOTA_DEBUG", "0").casefold() in YES_ANSWER

# Logging Configuration
TASMOTA_LOG_FORMAT: str = os.environ.get("TASMOTA_LOG_FORMAT", "human")  # "json", "human", or "both"
_json_file = os.environ.get("TASMOTA_LOG_JSON_FILE")
TASMOTA_LOG_JSON_FILE: str | None = _json_file if _json_file else None
TASMOTA_LOG_HUMAN_OUTPUT: str = os.environ.get("TASMOTA_LOG_HUMAN_OUTPUT", "stdout")  # "stdout", "stderr", or file path

MQTT_CLIENT_START_TASK_NAME = "MQTTClient_START"
COMMAND_PROCESSOR_TASK_NAME = "CommandProcessor_START"

# Tasmota topic layout: <prefix>/<topic name>/<suffix or verb>
TELE_PREFIX = "tele"
STAT_PREFIX = "stat"
CMND_PREFIX = "cmnd"

SUFFIX_STATE = "STATE"
SUFFIX_SENSOR = "SENSOR"
SUFFIX_STATUS10 = "STATUS10"
SUFFIX_RESULT = "RESULT"

VERB_POWER = "POWER"
VERB_THERMOSTAT_MODE_SET = "THERMOSTATMODESET"
VERB_TEMP_TARGET_SET = "TEMPTARGETSET"
VERB_STATUS = "STATUS"
# STATUS 10 asks the device for its sensor readings
STATUS_SENSOR_ARG = "10"

POWER_ON = "ON"
POWER_OFF = "OFF"

KEY_POWER = "POWER"
KEY_BME280 = "BME280"
KEY_TEMPERATURE = "Temperature"
KEY_HUMIDITY = "Humidity"
KEY_THERMOSTAT_0 = "Thermostat0"
KEY_THERMOSTAT_MODE_SET = "ThermostatModeSet"
KEY_TEMP_TARGET_SET = "TempTargetSet"
KEY_STATUS_SNS = "StatusSNS"
KEY_THERMOSTAT_MODE_SET_1 = "ThermostatModeSet1"
KEY_TEMP_TARGET_SET_1 = "TempTargetSet1"
