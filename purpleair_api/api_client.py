"""
PurpleAir API client.
Implements key checks, group management and sensor data retrieval for the
PurpleAir v1 REST API.
"""

import logging
import requests
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import ClientConfig, DEFAULT_BASE_URL
from .errors import (
    AuthError,
    DecodeError,
    ParamTypeError,
    RemoteError,
    TransportError,
    ValidationError,
    format_error_message
)
from .keys import KeyStore
from .models import (
    Group,
    GroupID,
    KeyType,
    Member,
    MemberID,
    PrivateInfo,
    SensorByIndex,
    SensorByLabel,
    SensorIndex,
    SensorInfo,
    SensorReference,
    decode_model,
    decode_model_list
)
from .params import (
    BULK_PARAMS,
    BULK_REQUIRED,
    MEMBER_PARAMS,
    PARAM_READ_KEY,
    SENSOR_PARAMS,
    SensorParams
)
from .transcoder import SensorDataSet, transcode


logger = logging.getLogger(__name__)

# The key header takes the read key for GET requests and the write key for
# POST and DELETE requests.
KEY_HEADER = "X-API-Key"
CONTENT_TYPE_HEADER = "Content-Type"
CONTENT_TYPE_JSON = "application/json"

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_NO_CONTENT = 204
AUTH_STATUSES = (401, 403)

ParamsArg = Union[SensorParams, Mapping[str, Any], None]


def _check_id(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an int, got {type(value).__name__}")
    return value


def _coerce_params(params: ParamsArg) -> SensorParams:
    if params is None:
        return SensorParams()
    if isinstance(params, SensorParams):
        return params
    if isinstance(params, Mapping):
        return SensorParams.from_mapping(params)
    raise ParamTypeError(f"Expected SensorParams or mapping, got {type(params).__name__}")


class PurpleAirClient:
    """
    Client for the PurpleAir API.
    Every call is a single request; nothing is retried or cached.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
        keys: Optional[KeyStore] = None
    ):
        """
        Initialize PurpleAir client.

        Args:
            base_url: Base URL for API endpoints
            timeout: Request timeout in seconds
            session: HTTP session to use (a new one if None)
            keys: Retained key store (an empty one if None)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.keys = keys if keys is not None else KeyStore()

    @classmethod
    def from_config(cls, config: ClientConfig, session: Optional[requests.Session] = None) -> 'PurpleAirClient':
        """
        Create API client from configuration.
        Configured keys are not checked or retained here.

        Args:
            config: ClientConfig object
            session: Optional HTTP session

        Returns:
            Configured PurpleAirClient instance
        """
        return cls(
            base_url=config.api.base_url,
            timeout=config.api.timeout,
            session=session
        )

    def _request(
        self,
        method: str,
        path: str,
        key: str,
        expected: int,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Make one API request.

        Args:
            method: HTTP method
            path: Path below the base URL
            key: Access key for the key header
            expected: Success status code for this call
            params: Optional query parameters
            body: Optional JSON body

        Returns:
            Decoded JSON object, or None for empty responses

        Raises:
            TransportError: If the request could not be made
            AuthError: If the service rejects the key
            RemoteError: If the service returns another unexpected status
            DecodeError: If the body is not the expected JSON
        """
        url = f"{self.base_url}{path}"
        headers = {CONTENT_TYPE_HEADER: CONTENT_TYPE_JSON, KEY_HEADER: key}

        logger.debug("%s %s params=%s", method, url, sorted(params) if params else [])
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=body,
                headers=headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TransportError(f"Request failed: {e}") from e

        if response.status_code != expected:
            raise self._error(response)

        if response.status_code == HTTP_NO_CONTENT:
            return None

        payload = self._decode_json(response)
        if not isinstance(payload, dict):
            raise DecodeError(f"Expected JSON object from {path}, got {type(payload).__name__}")
        return payload

    @staticmethod
    def _decode_json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON in response body: {e}") from e

    def _error(self, response: requests.Response) -> Exception:
        """Build the exception for an unexpected response status."""
        status = response.status_code
        try:
            payload = response.json()
        except ValueError:
            return DecodeError(f"Unexpected status {status} with undecodable error body")

        if not isinstance(payload, dict) or not isinstance(payload.get('error'), str):
            return DecodeError(f"Unexpected status {status} without error code", field="error")

        error = payload['error']
        description = payload.get('description')
        if not isinstance(description, str):
            description = None
        message = format_error_message(error, description)

        if status in AUTH_STATUSES:
            logger.warning("PurpleAir rejected key: %s", message)
            return AuthError(message, key_type=KeyType.UNKNOWN)

        logger.debug("PurpleAir error %d: %s", status, message)
        return RemoteError(message, status_code=status, error=error, description=description)

    @staticmethod
    def _field(payload: Dict[str, Any], name: str, kind: type) -> Any:
        value = payload.get(name)
        if isinstance(value, bool) or not isinstance(value, kind):
            raise DecodeError(f"Required element not found [{name}]", field=name)
        return value

    # Keys

    def check_key(self, key: str) -> KeyType:
        """
        Check the validity and permissions of an access key.
        The key is not retained; use set_key for that.

        Args:
            key: Access key to check

        Returns:
            KeyType reported by the service

        Raises:
            AuthError: If the service rejects the key (key_type is UNKNOWN)
        """
        if not isinstance(key, str) or not key:
            raise AuthError("Access key must be a non-empty string", key_type=KeyType.UNKNOWN)

        try:
            payload = self._request('GET', '/keys', key, HTTP_CREATED)
        except RemoteError as e:
            if e.status_code is not None and 400 <= e.status_code < 500:
                raise AuthError(str(e), key_type=KeyType.UNKNOWN) from e
            raise

        value = self._field(payload, 'api_key_type', str)
        try:
            key_type = KeyType(value)
        except ValueError:
            raise DecodeError(f"Unknown key type [{value}]", field='api_key_type')

        logger.debug("Key checked as %s", key_type.value)
        return key_type

    def set_key(self, key: str) -> KeyType:
        """
        Check a key and, if it is a read or write key, retain it for later calls.
        Only one key per class is retained; a new valid key replaces the old one.

        Args:
            key: Access key to check and retain

        Returns:
            KeyType reported by the service

        Raises:
            AuthError: If the service rejects the key (key_type is UNKNOWN)
        """
        key_type = self.check_key(key)
        self.keys.retain(key, key_type)
        return key_type

    # Groups

    def create_group(self, name: str) -> GroupID:
        """
        Create a group. Requires a retained write key.

        Args:
            name: Name of the new group

        Returns:
            GroupID of the created group
        """
        if not isinstance(name, str) or not name:
            raise ValidationError("Group name must be a non-empty string")

        key = self.keys.require_write()
        payload = self._request('POST', '/groups', key, HTTP_CREATED, body={'name': name})
        group_id = self._field(payload, 'group_id', int)

        logger.info("Created group %d (%s)", group_id, name)
        return group_id

    def delete_group(self, group_id: GroupID) -> None:
        """
        Delete a group. All members must be removed first or the
        service returns an error. Requires a retained write key.
        """
        group_id = _check_id('group_id', group_id)
        key = self.keys.require_write()
        self._request('DELETE', f"/groups/{group_id}", key, HTTP_NO_CONTENT)
        logger.info("Deleted group %d", group_id)

    def list_groups(self) -> List[Group]:
        """List the groups owned by the account. Requires a retained read key."""
        key = self.keys.require_read()
        payload = self._request('GET', '/groups', key, HTTP_OK)
        return decode_model_list(Group, payload.get('groups'), 'groups')

    def list_group_members(self, group_id: GroupID) -> List[Member]:
        """List the members of a group. Requires a retained read key."""
        group_id = _check_id('group_id', group_id)
        key = self.keys.require_read()
        payload = self._request('GET', f"/groups/{group_id}", key, HTTP_OK)
        return decode_model_list(Member, payload.get('members'), 'members')

    def add_member(
        self,
        group_id: GroupID,
        sensor: SensorReference,
        private_info: Optional[PrivateInfo] = None
    ) -> MemberID:
        """
        Add a sensor to a group. Requires a retained write key.

        Args:
            group_id: Group to add the sensor to
            sensor: SensorByIndex or SensorByLabel reference
            private_info: Owner email and location, needed for private sensors

        Returns:
            MemberID of the new membership
        """
        group_id = _check_id('group_id', group_id)
        if not isinstance(sensor, (SensorByIndex, SensorByLabel)):
            raise ValidationError(
                f"sensor must be SensorByIndex or SensorByLabel, got {type(sensor).__name__}"
            )

        body = sensor.to_wire()
        if private_info is not None:
            body['owner_email'] = private_info.email
            body['location_type'] = int(private_info.location)

        key = self.keys.require_write()
        payload = self._request(
            'POST', f"/groups/{group_id}/members", key, HTTP_CREATED, body=body
        )
        member_id = self._field(payload, 'member_id', int)

        logger.info("Added member %d to group %d", member_id, group_id)
        return member_id

    def remove_member(self, member_id: MemberID, group_id: GroupID) -> None:
        """Remove a member from a group. Requires a retained write key."""
        member_id = _check_id('member_id', member_id)
        group_id = _check_id('group_id', group_id)
        key = self.keys.require_write()
        self._request('DELETE', f"/groups/{group_id}/members/{member_id}", key, HTTP_NO_CONTENT)
        logger.info("Removed member %d from group %d", member_id, group_id)

    # Sensor data

    def sensor_data(self, sensor_index: SensorIndex, params: ParamsArg = None) -> SensorInfo:
        """
        Get the data for one sensor.

        Args:
            sensor_index: Sensor to query
            params: Optional fields and per-call read key

        Returns:
            SensorInfo with the requested (or all available) fields

        Raises:
            ParamValidationError: If a parameter other than fields/read_key is given
            AuthError: If no read key is retained and no read_key is given
        """
        sensor_index = _check_id('sensor_index', sensor_index)
        query = _coerce_params(params).encode(SENSOR_PARAMS)

        key = self.keys.read_key or query.get(PARAM_READ_KEY)
        if not key:
            raise AuthError("PurpleAir read key is not set", key_type=KeyType.UNKNOWN)

        payload = self._request('GET', f"/sensors/{sensor_index}", key, HTTP_OK, params=query)
        return self._sensor(payload)

    def member_data(
        self,
        group_id: GroupID,
        member_id: MemberID,
        params: ParamsArg = None
    ) -> SensorInfo:
        """
        Get the data for one member of a group. Requires a retained read key.

        Args:
            group_id: Group the member belongs to
            member_id: Member to query
            params: Optional fields selection

        Returns:
            SensorInfo with the requested (or all available) fields
        """
        group_id = _check_id('group_id', group_id)
        member_id = _check_id('member_id', member_id)
        query = _coerce_params(params).encode(MEMBER_PARAMS)

        key = self.keys.require_read()
        payload = self._request(
            'GET', f"/groups/{group_id}/members/{member_id}", key, HTTP_OK, params=query
        )
        return self._sensor(payload)

    def sensors_data(self, params: ParamsArg) -> SensorDataSet:
        """
        Get the requested fields for a set of sensors.
        The fields parameter is required. Requires a retained read key.

        Args:
            params: Fields plus optional filters

        Returns:
            Mapping of sensor index to {field name: value}
        """
        query = _coerce_params(params).encode(BULK_PARAMS, BULK_REQUIRED)
        key = self.keys.require_read()
        payload = self._request('GET', '/sensors', key, HTTP_OK, params=query)
        return transcode(payload)

    def members_data(self, group_id: GroupID, params: ParamsArg) -> SensorDataSet:
        """
        Get the requested fields for every member of a group.
        The fields parameter is required. Requires a retained read key.

        Args:
            group_id: Group to query
            params: Fields plus optional filters

        Returns:
            Mapping of sensor index to {field name: value}
        """
        group_id = _check_id('group_id', group_id)
        query = _coerce_params(params).encode(BULK_PARAMS, BULK_REQUIRED)
        key = self.keys.require_read()
        payload = self._request('GET', f"/groups/{group_id}/members", key, HTTP_OK, params=query)
        return transcode(payload)

    @staticmethod
    def _sensor(payload: Dict[str, Any]) -> SensorInfo:
        if 'sensor' not in payload:
            raise DecodeError("Required element not found [sensor]", field='sensor')
        return decode_model(SensorInfo, payload['sensor'], 'sensor')

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
