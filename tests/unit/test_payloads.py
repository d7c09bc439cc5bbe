"""Unit tests for payload decoding and field helpers."""

import logging

import pytest

from tasmota_thermostat.exceptions import PayloadDecodeError
from tasmota_thermostat.mqtt.payloads import (
    as_number,
    decode_payload,
    lookup,
    mode_to_heating_state,
    power_to_bool,
    present,
)
from tasmota_thermostat.structs import HeatingState


class TestDecodePayload:
    def test_decodes_object(self):
        assert decode_payload("t", b'{"POWER":"ON"}') == {"POWER": "ON"}

    def test_bad_json_raises(self):
        with pytest.raises(PayloadDecodeError) as exc_info:
            _ = decode_payload("tele/x/SENSOR", b"{invalid json")

        assert exc_info.value.topic == "tele/x/SENSOR"
        assert "bad JSON" in exc_info.value.reason

    def test_non_utf8_raises(self):
        with pytest.raises(PayloadDecodeError, match="UTF-8"):
            _ = decode_payload("t", b"\xff\xfe\x00")

    @pytest.mark.parametrize("payload", [b"[1, 2]", b'"ON"', b"42", b"null"])
    def test_non_object_raises(self, payload):
        with pytest.raises(PayloadDecodeError, match="expected a JSON object"):
            _ = decode_payload("t", payload)


class TestLookup:
    def test_nested_path(self):
        payload = {"StatusSNS": {"BME280": {"Temperature": 21.4}}}

        assert lookup(payload, "StatusSNS", "BME280", "Temperature") == 21.4

    def test_missing_path_returns_none(self):
        assert lookup({"BME280": {}}, "BME280", "Humidity") is None
        assert lookup({}, "BME280", "Humidity") is None

    def test_non_object_intermediate_returns_none(self):
        assert lookup({"BME280": 5}, "BME280", "Temperature") is None


class TestFieldHelpers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, False), (0, False), ("", False), (False, False), (1, True), ("OFF", True), (0.1, True)],
    )
    def test_present(self, value, expected):
        assert present(value) is expected

    def test_power_to_bool(self):
        assert power_to_bool("ON") is True
        assert power_to_bool("OFF") is False
        assert power_to_bool("on") is False

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(1, HeatingState.HEAT), (1.0, HeatingState.HEAT), (2, HeatingState.OFF), ("1", HeatingState.OFF), (True, HeatingState.OFF)],
    )
    def test_mode_mapping(self, value, expected):
        assert mode_to_heating_state(value) is expected

    def test_as_number_accepts_numbers(self):
        assert as_number(22.3, "Temperature") == 22.3
        assert as_number(41, "Humidity") == 41
        assert as_number("19.5", "TempTargetSet") == 19.5
        assert as_number("19", "TempTargetSet") == 19

    @pytest.mark.parametrize("value", ["warm", True, {"x": 1}, [1], "nan", float("inf")])
    def test_as_number_rejects_non_numeric(self, value, caplog):
        with caplog.at_level(logging.WARNING):
            assert as_number(value, "Temperature") is None
        assert "Ignoring non-numeric Temperature" in caplog.text
