"""
Unit tests for bulk payload transcoding.
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from purpleair_api import DecodeError, transcode


LABELS = {
    "location_types": ["outside", "inside"],
    "channel_states": ["No PM", "PM-A", "PM-B", "PM-A+PM-B"],
    "channel_flags": ["Normal", "A-Downgraded", "B-Downgraded", "A+B-Downgraded"],
}


def payload(fields, data, **overrides):
    body = {"api_version": "V1.0.10", "fields": fields, "data": data}
    body.update(LABELS)
    body.update(overrides)
    return body


class TestTranscode:
    """Tests for building per-sensor records from columnar rows."""

    def test_location_label(self):
        """Test enumerated codes are replaced by their labels."""
        result = transcode(payload(["sensor_index", "location_type"], [[42, 1]]))

        assert result == {42: {"sensor_index": 42, "location_type": "inside"}}

    def test_channel_labels(self):
        result = transcode(payload(
            ["sensor_index", "channel_state", "channel_flags"],
            [[1, 3, 0], [2, 1, 2]]
        ))

        assert result[1]["channel_state"] == "PM-A+PM-B"
        assert result[1]["channel_flags"] == "Normal"
        assert result[2]["channel_state"] == "PM-A"
        assert result[2]["channel_flags"] == "B-Downgraded"

    def test_plain_values_pass_through(self):
        result = transcode(payload(
            ["sensor_index", "name", "pm2.5", "humidity"],
            [[131075, "Backyard", 0.0, None]]
        ))

        assert result[131075] == {
            "sensor_index": 131075, "name": "Backyard", "pm2.5": 0.0, "humidity": None
        }

    def test_sensor_index_not_first(self):
        result = transcode(payload(["name", "sensor_index"], [["a", 7], ["b", 8]]))

        assert sorted(result) == [7, 8]
        assert result[8]["name"] == "b"

    def test_empty_data(self):
        assert transcode(payload(["sensor_index", "name"], [])) == {}

    def test_null_data(self):
        assert transcode(payload(["sensor_index"], None)) == {}

    def test_integral_float_index(self):
        result = transcode(payload(["sensor_index"], [[5.0]]))

        assert list(result) == [5]
        assert isinstance(list(result)[0], int)


class TestTranscodeErrors:
    """Tests for malformed bulk payloads."""

    def test_missing_sensor_index(self):
        with pytest.raises(DecodeError) as exc_info:
            transcode(payload(["name", "pm2.5"], [["a", 1.0]]))

        assert exc_info.value.field == "sensor_index"

    def test_null_sensor_index(self):
        with pytest.raises(DecodeError):
            transcode(payload(["sensor_index", "name"], [[None, "a"]]))

    def test_missing_label_table(self):
        body = payload(["sensor_index", "location_type"], [[1, 0]])
        del body["location_types"]

        with pytest.raises(DecodeError) as exc_info:
            transcode(body)

        assert exc_info.value.field == "location_type"
        assert "location_types" in str(exc_info.value)

    def test_code_outside_table(self):
        with pytest.raises(DecodeError, match="outside label table"):
            transcode(payload(["sensor_index", "channel_state"], [[1, 4]]))

    def test_negative_code(self):
        with pytest.raises(DecodeError):
            transcode(payload(["sensor_index", "channel_flags"], [[1, -1]]))

    @pytest.mark.parametrize("code", [float("nan"), float("inf"), 1.5])
    def test_non_whole_code(self, code):
        with pytest.raises(DecodeError) as exc_info:
            transcode(payload(["sensor_index", "location_type"], [[1, code]]))

        assert exc_info.value.field == "location_type"

    @pytest.mark.parametrize("index", [float("nan"), float("-inf"), 2.5, "7"])
    def test_non_whole_sensor_index(self, index):
        with pytest.raises(DecodeError) as exc_info:
            transcode(payload(["sensor_index"], [[index]]))

        assert exc_info.value.field == "sensor_index"

    def test_non_numeric_code(self):
        with pytest.raises(DecodeError):
            transcode(payload(["sensor_index", "location_type"], [[1, "inside"]]))

    def test_row_length_mismatch(self):
        with pytest.raises(DecodeError) as exc_info:
            transcode(payload(["sensor_index", "name"], [[1]]))

        assert exc_info.value.field == "data"

    def test_missing_fields(self):
        with pytest.raises(DecodeError) as exc_info:
            transcode({"data": [[1]]})

        assert exc_info.value.field == "fields"

    def test_data_not_array(self):
        with pytest.raises(DecodeError):
            transcode(payload(["sensor_index"], {"1": [1]}))
