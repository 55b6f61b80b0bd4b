"""
Client library for the PurpleAir air-quality sensor API.

This module provides typed access to the PurpleAir v1 REST API: access key
validation, sensor group management and per-sensor or bulk sensor data
retrieval with field selection.

Architecture:
- API Client: Request building, key attachment and response decoding
- Keys: Retained read/write access keys
- Params: Typed sensor query parameters and per-call allow-lists
- Transcoder: Columnar bulk payloads into per-sensor records
- Models: Pydantic models for groups, members and sensor data
- Repository: Configuration-driven access with DataFrame output
- Config: YAML-based configuration management

Example Usage:
    from purpleair_api import PurpleAirClient, SensorParams, Fields, ShowOnly

    client = PurpleAirClient()
    client.set_key(read_key)

    info = client.sensor_data(131075, SensorParams(Fields.of('name', 'pm2.5')))
    data = client.sensors_data(
        SensorParams(Fields.of('name', 'pm2.5'), ShowOnly(indices=[131075, 131077]))
    )
"""

from .models import (
    KeyType,
    Location,
    Privacy,
    ChannelState,
    ChannelFlag,
    SensorIndex,
    SensorID,
    GroupID,
    MemberID,
    Group,
    Member,
    PrivateInfo,
    SensorByIndex,
    SensorByLabel,
    SensorReference,
    SensorStats,
    SensorInfo
)

from .params import (
    SensorParams,
    SensorParam,
    Fields,
    LocationType,
    ReadKey,
    ReadKeys,
    ShowOnly,
    ModifiedSince,
    MaxAge,
    BoundingBox
)

from .fields import (
    DATA_FIELDS,
    FIELD_GROUPS,
    validate_fields
)

from .transcoder import (
    SensorDataRow,
    SensorDataSet,
    transcode
)

from .keys import KeyStore

from .api_client import PurpleAirClient

from .repository import (
    SensorRepository,
    RepositoryError
)

from .config import (
    ClientConfig,
    APISettings,
    LoggingSettings,
    configure_logging,
    load_config
)

from .errors import (
    PurpleAirError,
    ValidationError,
    ParamValidationError,
    ParamNotAllowedError,
    ParamTypeError,
    MissingParamError,
    AuthError,
    RemoteError,
    DecodeError,
    TransportError
)

__all__ = [
    # Main client
    'PurpleAirClient',
    'SensorRepository',
    'KeyStore',

    # Models
    'KeyType',
    'Location',
    'Privacy',
    'ChannelState',
    'ChannelFlag',
    'SensorIndex',
    'SensorID',
    'GroupID',
    'MemberID',
    'Group',
    'Member',
    'PrivateInfo',
    'SensorByIndex',
    'SensorByLabel',
    'SensorReference',
    'SensorStats',
    'SensorInfo',

    # Parameters
    'SensorParams',
    'SensorParam',
    'Fields',
    'LocationType',
    'ReadKey',
    'ReadKeys',
    'ShowOnly',
    'ModifiedSince',
    'MaxAge',
    'BoundingBox',
    'DATA_FIELDS',
    'FIELD_GROUPS',
    'validate_fields',

    # Bulk data
    'SensorDataRow',
    'SensorDataSet',
    'transcode',

    # Configuration
    'ClientConfig',
    'APISettings',
    'LoggingSettings',
    'configure_logging',
    'load_config',

    # Errors
    'PurpleAirError',
    'ValidationError',
    'ParamValidationError',
    'ParamNotAllowedError',
    'ParamTypeError',
    'MissingParamError',
    'AuthError',
    'RemoteError',
    'DecodeError',
    'TransportError',
    'RepositoryError',
]

__version__ = '0.1.0'
__description__ = 'Client library for the PurpleAir sensor API'
