"""
Catalogue of the data field names accepted in a "fields" selection.
"""

from typing import Dict, Iterable, List, Tuple

from .errors import ParamValidationError


FIELD_GROUPS: Dict[str, Tuple[str, ...]] = {
    "station": (
        "sensor_index", "name", "icon", "model", "hardware", "location_type",
        "private", "latitude", "longitude", "altitude", "position_rating",
        "led_brightness", "firmware_version", "firmware_upgrade", "rssi",
        "uptime", "pa_latency", "memory", "last_seen", "last_modified",
        "date_created", "channel_state", "channel_flags", "channel_flags_manual",
        "channel_flags_auto", "confidence", "confidence_manual", "confidence_auto",
    ),
    "environmental": (
        "humidity", "humidity_a", "humidity_b",
        "temperature", "temperature_a", "temperature_b",
        "pressure", "pressure_a", "pressure_b",
    ),
    "miscellaneous": (
        "voc", "voc_a", "voc_b", "ozone1", "analog_input",
    ),
    "pm1.0": (
        "pm1.0", "pm1.0_a", "pm1.0_b",
        "pm1.0_atm", "pm1.0_atm_a", "pm1.0_atm_b",
        "pm1.0_cf_1", "pm1.0_cf_1_a", "pm1.0_cf_1_b",
    ),
    "pm2.5": (
        "pm2.5_alt", "pm2.5_alt_a", "pm2.5_alt_b",
        "pm2.5", "pm2.5_a", "pm2.5_b",
        "pm2.5_atm", "pm2.5_atm_a", "pm2.5_atm_b",
        "pm2.5_cf_1", "pm2.5_cf_1_a", "pm2.5_cf_1_b",
    ),
    "pm2.5_averages": (
        "pm2.5_10minute", "pm2.5_10minute_a", "pm2.5_10minute_b",
        "pm2.5_30minute", "pm2.5_30minute_a", "pm2.5_30minute_b",
        "pm2.5_60minute", "pm2.5_60minute_a", "pm2.5_60minute_b",
        "pm2.5_6hour", "pm2.5_6hour_a", "pm2.5_6hour_b",
        "pm2.5_24hour", "pm2.5_24hour_a", "pm2.5_24hour_b",
        "pm2.5_1week", "pm2.5_1week_a", "pm2.5_1week_b",
    ),
    "pm10.0": (
        "pm10.0", "pm10.0_a", "pm10.0_b",
        "pm10.0_atm", "pm10.0_atm_a", "pm10.0_atm_b",
        "pm10.0_cf_1", "pm10.0_cf_1_a", "pm10.0_cf_1_b",
    ),
    "particle_count": (
        "0.3_um_count", "0.3_um_count_a", "0.3_um_count_b",
        "0.5_um_count", "0.5_um_count_a", "0.5_um_count_b",
        "1.0_um_count", "1.0_um_count_a", "1.0_um_count_b",
        "2.5_um_count", "2.5_um_count_a", "2.5_um_count_b",
        "5.0_um_count", "5.0_um_count_a", "5.0_um_count_b",
        "10.0_um_count", "10.0_um_count_a", "10.0_um_count_b",
    ),
    "thingspeak": (
        "primary_id_a", "primary_key_a", "secondary_id_a", "secondary_key_a",
        "primary_id_b", "primary_key_b", "secondary_id_b", "secondary_key_b",
    ),
}

DATA_FIELDS: Tuple[str, ...] = tuple(
    name for names in FIELD_GROUPS.values() for name in names
)

# Bulk responses carry a label table for each of these fields
ENUMERATED_FIELDS: Dict[str, str] = {
    "location_type": "location_types",
    "channel_state": "channel_states",
    "channel_flags": "channel_flags",
}


def validate_fields(names: Iterable[str]) -> List[str]:
    """
    Check that every name is a known data field.

    Args:
        names: Field names to check

    Returns:
        The names as a list, in the given order

    Raises:
        ParamValidationError: If a name is not in the catalogue
    """
    known = set(DATA_FIELDS)
    names = list(names)
    unknown = [n for n in names if n not in known]
    if unknown:
        raise ParamValidationError(
            f"Unknown sensor data field(s) [{', '.join(unknown)}]",
            key="fields"
        )
    return names
