"""
Conversion of the columnar bulk sensor payload into per-sensor records.

Bulk responses list the requested field names once and then one row of
positional values per sensor. Enumerated fields (location type, channel
state, channel flags) arrive as numeric codes into a label table carried in
the same payload.
"""

import logging
from typing import Any, Dict, Mapping

from .errors import DecodeError
from .fields import ENUMERATED_FIELDS


logger = logging.getLogger(__name__)

SensorDataRow = Dict[str, Any]
SensorDataSet = Dict[int, SensorDataRow]


def _whole_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int)


def _label(payload: Mapping[str, Any], field: str, code: Any) -> str:
    table_name = ENUMERATED_FIELDS[field]
    table = payload.get(table_name)
    if not isinstance(table, list):
        raise DecodeError(f"Missing label table [{table_name}] for field [{field}]", field=field)
    if not _whole_number(code):
        raise DecodeError(f"Invalid code for field [{field}]: {code!r}", field=field)
    code = int(code)
    if code < 0 or code >= len(table):
        raise DecodeError(
            f"Code {code} for field [{field}] outside label table [{table_name}]",
            field=field
        )
    return table[code]


def transcode(payload: Mapping[str, Any]) -> SensorDataSet:
    """
    Build a Bulk Data Set from a bulk sensors or members payload.

    Args:
        payload: Decoded JSON body with "fields", "data" and label tables

    Returns:
        Mapping of sensor index to {field name: value}

    Raises:
        DecodeError: If the payload shape is wrong or a row has no sensor_index
    """
    fields = payload.get("fields")
    rows = payload.get("data")
    if not isinstance(fields, list) or not all(isinstance(f, str) for f in fields):
        raise DecodeError("Bulk payload has no field list [fields]", field="fields")
    if rows is None:
        rows = []
    if not isinstance(rows, list):
        raise DecodeError("Bulk payload data is not an array [data]", field="data")

    data: SensorDataSet = {}
    for n, values in enumerate(rows):
        if not isinstance(values, list) or len(values) != len(fields):
            raise DecodeError(
                f"Row {n} does not match the field list ({len(fields)} fields)",
                field="data"
            )

        row: SensorDataRow = {}
        for field, value in zip(fields, values):
            if field in ENUMERATED_FIELDS:
                row[field] = _label(payload, field, value)
            else:
                row[field] = value

        index = row.get("sensor_index")
        if index is None:
            raise DecodeError("Required element not found [sensor_index]", field="sensor_index")
        if not _whole_number(index):
            raise DecodeError(f"Invalid sensor_index in row {n}: {index!r}", field="sensor_index")

        data[int(index)] = row

    logger.debug("Transcoded %d sensor rows", len(data))
    return data

