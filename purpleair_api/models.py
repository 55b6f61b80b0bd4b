"""
Pydantic models for PurpleAir entities and their wire conversions.

The service reports timestamps as Unix epoch seconds and enumerations as
numeric codes; both are converted while decoding. Every SensorInfo field is
optional so that a field the service did not return stays None rather than 0.
"""

from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError


SensorIndex = int   # assigned by the service, canonical sensor reference
SensorID = str      # printed on the device label
GroupID = int
MemberID = int      # valid only within its group


class KeyType(str, Enum):
    """Access key classifications reported by the keys endpoint."""
    UNKNOWN = "UNKNOWN"
    READ = "READ"
    WRITE = "WRITE"
    READ_DISABLED = "READ_DISABLED"
    WRITE_DISABLED = "WRITE_DISABLED"


class Location(IntEnum):
    """Sensor placement."""
    OUTSIDE = 0
    INSIDE = 1


class Privacy(IntEnum):
    """Sensor visibility."""
    PUBLIC = 0
    PRIVATE = 1


class ChannelState(IntEnum):
    """Which particulate channels were detected on the sensor."""
    NONE = 0
    A = 1
    B = 2
    BOTH = 3


class ChannelFlag(IntEnum):
    """Which particulate channels are marked as downgraded."""
    NORMAL = 0
    DOWNGRADED_A = 1
    DOWNGRADED_B = 2
    DOWNGRADED_BOTH = 3


def epoch_to_datetime(value: Any) -> Any:
    """
    Convert Unix epoch seconds to an aware UTC datetime.

    Datetimes pass through unchanged. Anything other than an int or
    integral float is rejected.
    """
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected epoch seconds, got {type(value).__name__}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected whole epoch seconds, got {value}")
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def datetime_to_epoch(value: datetime) -> int:
    """Convert a datetime to Unix epoch seconds (naive values are taken as UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class WireModel(BaseModel):
    """Base for records decoded from service payloads."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Group(WireModel):
    """A named collection of sensors."""
    id: GroupID = Field(description="Group identifier")
    name: str = Field(description="Group name")
    created: datetime = Field(description="Creation time (UTC)")

    @field_validator('created', mode='before')
    @classmethod
    def parse_created(cls, v: Any) -> Any:
        """Convert the epoch creation time."""
        return epoch_to_datetime(v)

    def to_wire(self) -> Dict[str, Any]:
        """Encode back to the service's JSON shape."""
        return {"id": self.id, "name": self.name, "created": datetime_to_epoch(self.created)}


class Member(WireModel):
    """A sensor's membership record within one group."""
    id: MemberID = Field(description="Member identifier within the group")
    sensor_index: SensorIndex = Field(description="Sensor index of the member")
    created: datetime = Field(description="Time the sensor was added (UTC)")

    @field_validator('created', mode='before')
    @classmethod
    def parse_created(cls, v: Any) -> Any:
        """Convert the epoch creation time."""
        return epoch_to_datetime(v)

    def to_wire(self) -> Dict[str, Any]:
        """Encode back to the service's JSON shape."""
        return {
            "id": self.id,
            "sensor_index": self.sensor_index,
            "created": datetime_to_epoch(self.created)
        }


class PrivateInfo(BaseModel):
    """
    Ownership details required when adding a private sensor to a group.

    The service checks the email against the sensor owner; repeated
    mismatches may get the write key suspended.
    """
    model_config = ConfigDict(frozen=True)

    email: str = Field(description="Email address of the sensor owner")
    location: Location = Field(description="Placement of the sensor")


class SensorByIndex(BaseModel):
    """Reference a sensor by its service-assigned index."""
    model_config = ConfigDict(frozen=True)

    index: SensorIndex

    def to_wire(self) -> Dict[str, Any]:
        return {"sensor_index": self.index}


class SensorByLabel(BaseModel):
    """Reference a sensor by the ID printed on its label."""
    model_config = ConfigDict(frozen=True)

    sensor_id: SensorID

    def to_wire(self) -> Dict[str, Any]:
        return {"sensor_id": self.sensor_id}


SensorReference = Union[SensorByIndex, SensorByLabel]


class SensorStats(WireModel):
    """Rolling PM2.5 averages for one channel (or both combined)."""
    pm2_5: Optional[float] = Field(default=None, alias="pm2.5")
    pm2_5_10minute: Optional[float] = Field(default=None, alias="pm2.5_10minute")
    pm2_5_30minute: Optional[float] = Field(default=None, alias="pm2.5_30minute")
    pm2_5_60minute: Optional[float] = Field(default=None, alias="pm2.5_60minute")
    pm2_5_6hour: Optional[float] = Field(default=None, alias="pm2.5_6hour")
    pm2_5_24hour: Optional[float] = Field(default=None, alias="pm2.5_24hour")
    pm2_5_1week: Optional[float] = Field(default=None, alias="pm2.5_1week")
    time_stamp: Optional[datetime] = Field(default=None)

    @field_validator('time_stamp', mode='before')
    @classmethod
    def parse_time_stamp(cls, v: Any) -> Any:
        return epoch_to_datetime(v)


def _opt(alias: Optional[str] = None) -> Any:
    return Field(default=None, alias=alias)


class SensorInfo(WireModel):
    """
    State of a single sensor as returned by the sensor and member endpoints.

    Attribute names follow the wire names with '.' replaced by '_'; names
    starting with a digit are prefixed with 'um'. Only the fields requested
    (and supported by the hardware) are populated.
    """

    # Station information and status
    sensor_index: Optional[SensorIndex] = _opt()
    icon: Optional[int] = _opt()
    name: Optional[str] = _opt()
    private: Optional[Privacy] = _opt()
    location_type: Optional[Location] = _opt()
    latitude: Optional[float] = _opt()
    longitude: Optional[float] = _opt()
    altitude: Optional[int] = _opt()
    position_rating: Optional[int] = _opt()
    model: Optional[str] = _opt()
    hardware: Optional[str] = _opt()
    firmware_version: Optional[str] = _opt()
    firmware_upgrade: Optional[str] = _opt()
    rssi: Optional[int] = _opt()
    uptime: Optional[int] = _opt()
    pa_latency: Optional[int] = _opt()
    memory: Optional[int] = _opt()
    led_brightness: Optional[int] = _opt()
    last_seen: Optional[datetime] = _opt()
    last_modified: Optional[datetime] = _opt()
    date_created: Optional[datetime] = _opt()
    channel_state: Optional[ChannelState] = _opt()
    channel_flags: Optional[ChannelFlag] = _opt()
    channel_flags_manual: Optional[ChannelFlag] = _opt()
    channel_flags_auto: Optional[ChannelFlag] = _opt()
    confidence: Optional[int] = _opt()
    confidence_manual: Optional[int] = _opt()
    confidence_auto: Optional[int] = _opt()

    # Environmental
    humidity: Optional[int] = _opt()
    humidity_a: Optional[int] = _opt()
    humidity_b: Optional[int] = _opt()
    temperature: Optional[int] = _opt()
    temperature_a: Optional[int] = _opt()
    temperature_b: Optional[int] = _opt()
    pressure: Optional[float] = _opt()
    pressure_a: Optional[float] = _opt()
    pressure_b: Optional[float] = _opt()

    # Miscellaneous
    voc: Optional[float] = _opt()
    voc_a: Optional[float] = _opt()
    voc_b: Optional[float] = _opt()
    ozone1: Optional[float] = _opt()
    analog_input: Optional[float] = _opt()

    # PM1.0
    pm1_0: Optional[float] = _opt("pm1.0")
    pm1_0_a: Optional[float] = _opt("pm1.0_a")
    pm1_0_b: Optional[float] = _opt("pm1.0_b")
    pm1_0_atm: Optional[float] = _opt("pm1.0_atm")
    pm1_0_atm_a: Optional[float] = _opt("pm1.0_atm_a")
    pm1_0_atm_b: Optional[float] = _opt("pm1.0_atm_b")
    pm1_0_cf_1: Optional[float] = _opt("pm1.0_cf_1")
    pm1_0_cf_1_a: Optional[float] = _opt("pm1.0_cf_1_a")
    pm1_0_cf_1_b: Optional[float] = _opt("pm1.0_cf_1_b")

    # PM2.5
    pm2_5_alt: Optional[float] = _opt("pm2.5_alt")
    pm2_5_alt_a: Optional[float] = _opt("pm2.5_alt_a")
    pm2_5_alt_b: Optional[float] = _opt("pm2.5_alt_b")
    pm2_5: Optional[float] = _opt("pm2.5")
    pm2_5_a: Optional[float] = _opt("pm2.5_a")
    pm2_5_b: Optional[float] = _opt("pm2.5_b")
    pm2_5_atm: Optional[float] = _opt("pm2.5_atm")
    pm2_5_atm_a: Optional[float] = _opt("pm2.5_atm_a")
    pm2_5_atm_b: Optional[float] = _opt("pm2.5_atm_b")
    pm2_5_cf_1: Optional[float] = _opt("pm2.5_cf_1")
    pm2_5_cf_1_a: Optional[float] = _opt("pm2.5_cf_1_a")
    pm2_5_cf_1_b: Optional[float] = _opt("pm2.5_cf_1_b")

    # PM2.5 pseudo averages
    pm2_5_10minute: Optional[float] = _opt("pm2.5_10minute")
    pm2_5_10minute_a: Optional[float] = _opt("pm2.5_10minute_a")
    pm2_5_10minute_b: Optional[float] = _opt("pm2.5_10minute_b")
    pm2_5_30minute: Optional[float] = _opt("pm2.5_30minute")
    pm2_5_30minute_a: Optional[float] = _opt("pm2.5_30minute_a")
    pm2_5_30minute_b: Optional[float] = _opt("pm2.5_30minute_b")
    pm2_5_60minute: Optional[float] = _opt("pm2.5_60minute")
    pm2_5_60minute_a: Optional[float] = _opt("pm2.5_60minute_a")
    pm2_5_60minute_b: Optional[float] = _opt("pm2.5_60minute_b")
    pm2_5_6hour: Optional[float] = _opt("pm2.5_6hour")
    pm2_5_6hour_a: Optional[float] = _opt("pm2.5_6hour_a")
    pm2_5_6hour_b: Optional[float] = _opt("pm2.5_6hour_b")
    pm2_5_24hour: Optional[float] = _opt("pm2.5_24hour")
    pm2_5_24hour_a: Optional[float] = _opt("pm2.5_24hour_a")
    pm2_5_24hour_b: Optional[float] = _opt("pm2.5_24hour_b")
    pm2_5_1week: Optional[float] = _opt("pm2.5_1week")
    pm2_5_1week_a: Optional[float] = _opt("pm2.5_1week_a")
    pm2_5_1week_b: Optional[float] = _opt("pm2.5_1week_b")

    # PM10.0
    pm10_0: Optional[float] = _opt("pm10.0")
    pm10_0_a: Optional[float] = _opt("pm10.0_a")
    pm10_0_b: Optional[float] = _opt("pm10.0_b")
    pm10_0_atm: Optional[float] = _opt("pm10.0_atm")
    pm10_0_atm_a: Optional[float] = _opt("pm10.0_atm_a")
    pm10_0_atm_b: Optional[float] = _opt("pm10.0_atm_b")
    pm10_0_cf_1: Optional[float] = _opt("pm10.0_cf_1")
    pm10_0_cf_1_a: Optional[float] = _opt("pm10.0_cf_1_a")
    pm10_0_cf_1_b: Optional[float] = _opt("pm10.0_cf_1_b")

    # Particle counts (per deciliter)
    um0_3_count: Optional[float] = _opt("0.3_um_count")
    um0_3_count_a: Optional[float] = _opt("0.3_um_count_a")
    um0_3_count_b: Optional[float] = _opt("0.3_um_count_b")
    um0_5_count: Optional[float] = _opt("0.5_um_count")
    um0_5_count_a: Optional[float] = _opt("0.5_um_count_a")
    um0_5_count_b: Optional[float] = _opt("0.5_um_count_b")
    um1_0_count: Optional[float] = _opt("1.0_um_count")
    um1_0_count_a: Optional[float] = _opt("1.0_um_count_a")
    um1_0_count_b: Optional[float] = _opt("1.0_um_count_b")
    um2_5_count: Optional[float] = _opt("2.5_um_count")
    um2_5_count_a: Optional[float] = _opt("2.5_um_count_a")
    um2_5_count_b: Optional[float] = _opt("2.5_um_count_b")
    um5_0_count: Optional[float] = _opt("5.0_um_count")
    um5_0_count_a: Optional[float] = _opt("5.0_um_count_a")
    um5_0_count_b: Optional[float] = _opt("5.0_um_count_b")
    um10_0_count: Optional[float] = _opt("10.0_um_count")
    um10_0_count_a: Optional[float] = _opt("10.0_um_count_a")
    um10_0_count_b: Optional[float] = _opt("10.0_um_count_b")

    # Rolling statistics
    stats: Optional[SensorStats] = _opt()
    stats_a: Optional[SensorStats] = _opt()
    stats_b: Optional[SensorStats] = _opt()

    # ThingSpeak
    primary_id_a: Optional[int] = _opt()
    primary_key_a: Optional[str] = _opt()
    secondary_id_a: Optional[int] = _opt()
    secondary_key_a: Optional[str] = _opt()
    primary_id_b: Optional[int] = _opt()
    primary_key_b: Optional[str] = _opt()
    secondary_id_b: Optional[int] = _opt()
    secondary_key_b: Optional[str] = _opt()

    @field_validator('last_seen', 'last_modified', 'date_created', mode='before')
    @classmethod
    def parse_epoch_fields(cls, v: Any) -> Any:
        """Convert epoch-second status times."""
        return epoch_to_datetime(v)

    def present_fields(self) -> List[str]:
        """Wire names of the fields the service actually returned."""
        names = []
        for attr in self.model_fields_set:
            info = type(self).model_fields[attr]
            names.append(info.alias or attr)
        return sorted(names)


ModelT = TypeVar('ModelT', bound=BaseModel)


def decode_model(model: Type[ModelT], payload: Any, context: str) -> ModelT:
    """
    Validate a decoded JSON object into a model.

    Args:
        model: Model class to build
        payload: Decoded JSON value
        context: Name of the payload element, used in error messages

    Returns:
        Model instance

    Raises:
        DecodeError: If the payload does not match the model
    """
    if not isinstance(payload, dict):
        raise DecodeError(
            f"Expected object for {context}, got {type(payload).__name__}",
            field=context
        )
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get('loc', ())) or context
        raise DecodeError(f"Invalid {context} field [{field}]: {first.get('msg')}", field=field)


def decode_model_list(model: Type[ModelT], payload: Any, context: str) -> List[ModelT]:
    """Validate a decoded JSON array into a list of models."""
    if not isinstance(payload, list):
        raise DecodeError(
            f"Expected array for {context}, got {type(payload).__name__}",
            field=context
        )
    return [decode_model(model, item, context) for item in payload]
