"""
Sensor query parameters and their query-string encoding.

Each parameter key accepts exactly one kind of value. The typed parameter
classes (Fields, ShowOnly, BoundingBox, ...) can only be built with legal
values; SensorParams.from_mapping accepts a loose key/value mapping and
checks every value against its key before anything is encoded.
"""

from datetime import datetime
from typing import Any, Callable, ClassVar, Dict, FrozenSet, Iterable, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import MissingParamError, ParamNotAllowedError, ParamTypeError
from .fields import validate_fields
from .models import Location, SensorIndex, datetime_to_epoch


PARAM_FIELDS = "fields"
PARAM_LOCATION = "location_type"
PARAM_READ_KEY = "read_key"
PARAM_READ_KEYS = "read_keys"
PARAM_SHOW_ONLY = "show_only"
PARAM_MODIFIED_SINCE = "modified_since"
PARAM_MAX_AGE = "max_age"
PARAM_NW_LNG = "nwlng"
PARAM_NW_LAT = "nwlat"
PARAM_SE_LNG = "selng"
PARAM_SE_LAT = "selat"

BOUNDING_BOX_PARAMS: FrozenSet[str] = frozenset(
    {PARAM_NW_LNG, PARAM_NW_LAT, PARAM_SE_LNG, PARAM_SE_LAT}
)

# Allow-lists per operation family
SENSOR_PARAMS: FrozenSet[str] = frozenset({PARAM_FIELDS, PARAM_READ_KEY})
MEMBER_PARAMS: FrozenSet[str] = frozenset({PARAM_FIELDS})
BULK_PARAMS: FrozenSet[str] = frozenset({
    PARAM_FIELDS, PARAM_LOCATION, PARAM_READ_KEYS, PARAM_SHOW_ONLY,
    PARAM_MODIFIED_SINCE, PARAM_MAX_AGE,
}) | BOUNDING_BOX_PARAMS
BULK_REQUIRED: FrozenSet[str] = frozenset({PARAM_FIELDS})


def _is_str_list(v: Any) -> bool:
    return isinstance(v, (list, tuple)) and len(v) > 0 and all(isinstance(i, str) for i in v)


def _is_index_list(v: Any) -> bool:
    return isinstance(v, (list, tuple)) and len(v) > 0 and all(
        isinstance(i, int) and not isinstance(i, bool) for i in v
    )


def _is_seconds(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v >= 0


def _in_range(limit: float) -> Callable[[Any], bool]:
    def check(v: Any) -> bool:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return False
        return -limit <= v <= limit
    return check


def _join(values: Iterable[Any]) -> str:
    return ",".join(str(v) for v in values)


def _coordinate(v: float) -> str:
    return format(float(v), 'f')


# key -> (expected type description, type check, encoder)
PARAM_TYPES: Dict[str, Tuple[str, Callable[[Any], bool], Callable[[Any], str]]] = {
    PARAM_FIELDS: ("non-empty list of field names", _is_str_list, _join),
    PARAM_LOCATION: ("Location", lambda v: isinstance(v, Location), lambda v: str(int(v))),
    PARAM_READ_KEY: ("str", lambda v: isinstance(v, str), str),
    PARAM_READ_KEYS: ("non-empty list of keys", _is_str_list, _join),
    PARAM_SHOW_ONLY: ("non-empty list of sensor indices", _is_index_list, _join),
    PARAM_MODIFIED_SINCE: (
        "datetime", lambda v: isinstance(v, datetime), lambda v: str(datetime_to_epoch(v))
    ),
    PARAM_MAX_AGE: ("non-negative int seconds", _is_seconds, str),
    PARAM_NW_LNG: ("longitude in [-180, 180]", _in_range(180.0), _coordinate),
    PARAM_NW_LAT: ("latitude in [-90, 90]", _in_range(90.0), _coordinate),
    PARAM_SE_LNG: ("longitude in [-180, 180]", _in_range(180.0), _coordinate),
    PARAM_SE_LAT: ("latitude in [-90, 90]", _in_range(90.0), _coordinate),
}


def encode_value(key: str, value: Any) -> str:
    """
    Check and encode one parameter value.

    Raises:
        ParamNotAllowedError: If the key is not a known sensor parameter
        ParamTypeError: If the value has the wrong type for the key
    """
    if key not in PARAM_TYPES:
        raise ParamNotAllowedError(f"Unexpected sensor param encountered [{key}]", key=key)

    expected, check, encode = PARAM_TYPES[key]
    if not check(value):
        raise ParamTypeError(
            f"Invalid value for sensor param [{key}]: expected {expected}, "
            f"got {type(value).__name__}",
            key=key
        )
    return encode(value)


class SensorParam(BaseModel):
    """Base for typed sensor query parameters."""
    model_config = ConfigDict(frozen=True, strict=True)

    keys: ClassVar[Tuple[str, ...]] = ()
    # attribute -> query key, where a parameter sets more than one key
    attr_keys: ClassVar[Dict[str, str]] = {}

    @model_validator(mode="wrap")
    @classmethod
    def raise_param_error(cls, data: Any, handler: Callable[[Any], Any]) -> Any:
        """Report invalid values as ParamTypeError naming the query key."""
        try:
            return handler(data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            loc = first.get("loc", ())
            attr = str(loc[0]) if loc else ""
            key = cls.attr_keys.get(attr, cls.keys[0] if cls.keys else attr)
            raise ParamTypeError(
                f"Invalid value for sensor param [{key}]: {first.get('msg')}", key=key
            ) from e

    def values(self) -> Dict[str, Any]:
        """Raw value for each query key this parameter sets."""
        raise NotImplementedError

    def render(self) -> Dict[str, str]:
        """Encoded query-string value for each key."""
        return {k: encode_value(k, v) for k, v in self.values().items()}


class Fields(SensorParam):
    """Which data fields to return."""
    keys: ClassVar[Tuple[str, ...]] = (PARAM_FIELDS,)
    names: List[str] = Field(min_length=1)

    @classmethod
    def of(cls, *names: str, check: bool = False) -> 'Fields':
        """
        Build from positional names.

        Args:
            names: Field names
            check: Reject names missing from the field catalogue
        """
        if check:
            validate_fields(names)
        return cls(names=list(names))

    def values(self) -> Dict[str, Any]:
        return {PARAM_FIELDS: self.names}


class LocationType(SensorParam):
    """Only return sensors placed inside or outside."""
    keys: ClassVar[Tuple[str, ...]] = (PARAM_LOCATION,)
    location: Location

    def values(self) -> Dict[str, Any]:
        return {PARAM_LOCATION: self.location}


class ReadKey(SensorParam):
    """Per-call read key for a single private sensor."""
    keys: ClassVar[Tuple[str, ...]] = (PARAM_READ_KEY,)
    key: str = Field(min_length=1)

    def values(self) -> Dict[str, Any]:
        return {PARAM_READ_KEY: self.key}


class ReadKeys(SensorParam):
    """Read keys for private sensors included in a bulk query."""
    keys: ClassVar[Tuple[str, ...]] = (PARAM_READ_KEYS,)
    read_keys: List[str] = Field(min_length=1)

    def values(self) -> Dict[str, Any]:
        return {PARAM_READ_KEYS: self.read_keys}


class ShowOnly(SensorParam):
    """Restrict a bulk query to the listed sensor indices."""
    keys: ClassVar[Tuple[str, ...]] = (PARAM_SHOW_ONLY,)
    indices: List[SensorIndex] = Field(min_length=1)

    def values(self) -> Dict[str, Any]:
        return {PARAM_SHOW_ONLY: self.indices}


class ModifiedSince(SensorParam):
    """Only return sensors modified after this time."""
    keys: ClassVar[Tuple[str, ...]] = (PARAM_MODIFIED_SINCE,)
    since: datetime

    def values(self) -> Dict[str, Any]:
        return {PARAM_MODIFIED_SINCE: self.since}


class MaxAge(SensorParam):
    """Only return sensors updated within the last `seconds` seconds."""
    keys: ClassVar[Tuple[str, ...]] = (PARAM_MAX_AGE,)
    seconds: int = Field(ge=0)

    def values(self) -> Dict[str, Any]:
        return {PARAM_MAX_AGE: self.seconds}


class BoundingBox(SensorParam):
    """Only return sensors inside the box given by its NW and SE corners."""
    keys: ClassVar[Tuple[str, ...]] = (PARAM_NW_LNG, PARAM_NW_LAT, PARAM_SE_LNG, PARAM_SE_LAT)
    attr_keys: ClassVar[Dict[str, str]] = {
        "nw_lng": PARAM_NW_LNG, "nw_lat": PARAM_NW_LAT,
        "se_lng": PARAM_SE_LNG, "se_lat": PARAM_SE_LAT,
    }
    nw_lng: float = Field(ge=-180.0, le=180.0)
    nw_lat: float = Field(ge=-90.0, le=90.0)
    se_lng: float = Field(ge=-180.0, le=180.0)
    se_lat: float = Field(ge=-90.0, le=90.0)

    def values(self) -> Dict[str, Any]:
        return {
            PARAM_NW_LNG: self.nw_lng,
            PARAM_NW_LAT: self.nw_lat,
            PARAM_SE_LNG: self.se_lng,
            PARAM_SE_LAT: self.se_lat,
        }


class SensorParams:
    """
    A set of query parameters for a sensor data call.

    Parameters are checked and encoded as they are added; which of them a
    call accepts is checked by encode().
    """

    def __init__(self, *params: SensorParam):
        self._query: Dict[str, str] = {}
        for param in params:
            self.add(param)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> 'SensorParams':
        """
        Build from a loose key/value mapping.

        Args:
            mapping: Parameter keys and their values

        Returns:
            SensorParams instance

        Raises:
            ParamNotAllowedError: If a key is not a sensor parameter
            ParamTypeError: If a value has the wrong type for its key
        """
        params = cls()
        for key, value in mapping.items():
            params._query[key] = encode_value(key, value)
        return params

    def add(self, param: SensorParam) -> 'SensorParams':
        """Add a typed parameter, replacing any previous value for its keys."""
        if not isinstance(param, SensorParam):
            raise ParamTypeError(
                f"Expected a sensor parameter, got {type(param).__name__}"
            )
        self._query.update(param.render())
        return self

    def get(self, key: str):
        """Encoded value for a key, or None."""
        return self._query.get(key)

    def keys(self) -> FrozenSet[str]:
        return frozenset(self._query)

    def __contains__(self, key: object) -> bool:
        return key in self._query

    def __len__(self) -> int:
        return len(self._query)

    def __repr__(self) -> str:
        shown = {k: ('***' if k in (PARAM_READ_KEY, PARAM_READ_KEYS) else v)
                 for k, v in self._query.items()}
        return f"SensorParams({shown})"

    def encode(
        self,
        allowed: FrozenSet[str],
        required: FrozenSet[str] = frozenset()
    ) -> Dict[str, str]:
        """
        Check the parameters against an operation's allow-list.

        Args:
            allowed: Keys the operation accepts
            required: Keys the operation requires

        Returns:
            Query-string parameters

        Raises:
            ParamNotAllowedError: If a key is not on the allow-list
            MissingParamError: If a required key is absent
        """
        for key in sorted(self._query):
            if key not in allowed:
                raise ParamNotAllowedError(f"Unexpected sensor param encountered [{key}]", key=key)

        for key in sorted(required):
            if key not in self._query:
                raise MissingParamError(f"Required sensor param not found [{key}]", key=key)

        return dict(self._query)
