"""
Shared fixtures: an in-memory stand-in for the PurpleAir service that
answers the HTTP calls a requests.Session would make.
"""

import itertools
import re
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from purpleair_api import PurpleAirClient


BASE_URL = "https://api.purpleair.com/v1"
READ_KEY = "READ-KEY-0000"
WRITE_KEY = "WRITE-KEY-0000"
CREATED = 1635575338

LOCATION_TYPES = ["outside", "inside"]
CHANNEL_STATES = ["No PM", "PM-A", "PM-B", "PM-A+PM-B"]
CHANNEL_FLAGS = ["Normal", "A-Downgraded", "B-Downgraded", "A+B-Downgraded"]

SENSORS = {
    131075: {
        "sensor_index": 131075,
        "name": "Backyard",
        "location_type": 0,
        "private": 0,
        "latitude": 45.5,
        "longitude": -122.6,
        "channel_state": 3,
        "channel_flags": 0,
        "humidity": 41,
        "temperature": 68,
        "pm2.5": 0.0,
        "pm2.5_a": 0.2,
        "pm2.5_b": 0.0,
        "last_seen": 1635575400,
        "stats": {
            "pm2.5": 0.0,
            "pm2.5_10minute": 0.1,
            "pm2.5_30minute": 0.2,
            "pm2.5_60minute": 0.3,
            "pm2.5_6hour": 0.4,
            "pm2.5_24hour": 0.5,
            "pm2.5_1week": 0.6,
            "time_stamp": 1635575338,
        },
    },
    131077: {
        "sensor_index": 131077,
        "name": "Garage",
        "location_type": 1,
        "private": 0,
        "latitude": 45.6,
        "longitude": -122.7,
        "channel_state": 1,
        "channel_flags": 2,
        "humidity": 35,
        "temperature": 71,
        "pm2.5": 12.4,
    },
}

SENSOR_LABELS = {"84:f3:eb:00:00:01": 131075, "84:f3:eb:00:00:02": 131077}


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


def error_response(status, error, description=None):
    payload = {"api_version": "V1.0.10", "time_stamp": CREATED, "error": error}
    if description:
        payload["description"] = description
    return FakeResponse(status, payload)


class FakePurpleAir:
    """Routes session.request calls to an in-memory PurpleAir service."""

    def __init__(self):
        self.keys = {READ_KEY: "READ", WRITE_KEY: "WRITE"}
        self.groups = {}
        self.calls = []
        self._group_ids = itertools.count(1001)
        self._member_ids = itertools.count(501)
        self.closed = False

    def close(self):
        self.closed = True

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({
            "method": method, "url": url, "params": params,
            "json": json, "headers": headers, "timeout": timeout,
        })
        path = url[len(BASE_URL):]
        key = (headers or {}).get("X-API-Key")

        if path == "/keys" and method == "GET":
            if key in self.keys:
                return FakeResponse(201, {"api_version": "V1.0.10", "api_key_type": self.keys[key]})
            return error_response(403, "ApiKeyInvalidError", "The provided api_key was not valid.")

        needed = "READ" if method == "GET" else "WRITE"
        if self.keys.get(key) != needed:
            return error_response(403, "ApiKeyTypeMismatchError")

        for pattern, handler in self._routes():
            match = re.fullmatch(pattern, path)
            if match and handler[0] == method:
                return handler[1](*[int(g) for g in match.groups()], params=params, body=json)
        return error_response(404, "NotFoundError", f"No route for {method} {path}")

    def _routes(self):
        return [
            (r"/groups", ("POST", self._create_group)),
            (r"/groups", ("GET", self._list_groups)),
            (r"/groups/(\d+)", ("GET", self._group_detail)),
            (r"/groups/(\d+)", ("DELETE", self._delete_group)),
            (r"/groups/(\d+)/members", ("POST", self._add_member)),
            (r"/groups/(\d+)/members", ("GET", self._members_data)),
            (r"/groups/(\d+)/members/(\d+)", ("GET", self._member_data)),
            (r"/groups/(\d+)/members/(\d+)", ("DELETE", self._remove_member)),
            (r"/sensors/(\d+)", ("GET", self._sensor_data)),
            (r"/sensors", ("GET", self._sensors_data)),
        ]

    def _create_group(self, params=None, body=None):
        group_id = next(self._group_ids)
        self.groups[group_id] = {"name": body["name"], "created": CREATED, "members": {}}
        return FakeResponse(201, {"group_id": group_id})

    def _list_groups(self, params=None, body=None):
        groups = [
            {"id": g, "name": v["name"], "created": v["created"]}
            for g, v in self.groups.items()
        ]
        return FakeResponse(200, {"groups": groups})

    def _group_detail(self, group_id, params=None, body=None):
        if group_id not in self.groups:
            return error_response(404, "NotFoundError")
        members = [
            {"id": m, "sensor_index": v["sensor_index"], "created": v["created"]}
            for m, v in self.groups[group_id]["members"].items()
        ]
        return FakeResponse(200, {"group_id": group_id, "members": members})

    def _delete_group(self, group_id, params=None, body=None):
        if group_id not in self.groups:
            return error_response(404, "NotFoundError")
        if self.groups[group_id]["members"]:
            return error_response(
                409, "GroupNotEmptyError", "All members must be removed before deleting a group."
            )
        del self.groups[group_id]
        return FakeResponse(204)

    def _add_member(self, group_id, params=None, body=None):
        if group_id not in self.groups:
            return error_response(404, "NotFoundError")
        if "sensor_index" in body:
            index = body["sensor_index"]
        else:
            index = SENSOR_LABELS.get(body.get("sensor_id"))
        if index not in SENSORS:
            return error_response(404, "NotFoundError", "Sensor not found.")
        member_id = next(self._member_ids)
        self.groups[group_id]["members"][member_id] = {"sensor_index": index, "created": CREATED}
        return FakeResponse(201, {"member_id": member_id})

    def _remove_member(self, group_id, member_id, params=None, body=None):
        members = self.groups.get(group_id, {}).get("members", {})
        if member_id not in members:
            return error_response(404, "NotFoundError")
        del members[member_id]
        return FakeResponse(204)

    def _select(self, sensor, params):
        if params and "fields" in params:
            wanted = set(params["fields"].split(",")) | {"sensor_index"}
            return {k: v for k, v in sensor.items() if k in wanted}
        return dict(sensor)

    def _sensor_data(self, index, params=None, body=None):
        if index not in SENSORS:
            return error_response(404, "NotFoundError")
        return FakeResponse(200, {"sensor": self._select(SENSORS[index], params)})

    def _member_data(self, group_id, member_id, params=None, body=None):
        members = self.groups.get(group_id, {}).get("members", {})
        if member_id not in members:
            return error_response(404, "NotFoundError")
        index = members[member_id]["sensor_index"]
        return FakeResponse(200, {"sensor": self._select(SENSORS[index], params)})

    def _bulk(self, indices, params):
        fields = ["sensor_index"] + [f for f in params["fields"].split(",") if f != "sensor_index"]
        if "show_only" in params:
            wanted = {int(i) for i in params["show_only"].split(",")}
            indices = [i for i in indices if i in wanted]
        rows = [[SENSORS[i].get(f) for f in fields] for i in indices]
        return FakeResponse(200, {
            "api_version": "V1.0.10",
            "fields": fields,
            "location_types": LOCATION_TYPES,
            "channel_states": CHANNEL_STATES,
            "channel_flags": CHANNEL_FLAGS,
            "data": rows,
        })

    def _sensors_data(self, params=None, body=None):
        return self._bulk(list(SENSORS), params)

    def _members_data(self, group_id, params=None, body=None):
        if group_id not in self.groups:
            return error_response(404, "NotFoundError")
        indices = [m["sensor_index"] for m in self.groups[group_id]["members"].values()]
        return self._bulk(indices, params)


@pytest.fixture
def fake_service():
    """In-memory PurpleAir service."""
    return FakePurpleAir()


@pytest.fixture
def client(fake_service):
    """Client wired to the fake service with no keys retained."""
    return PurpleAirClient(base_url=BASE_URL, session=fake_service)


@pytest.fixture
def keyed_client(client):
    """Client with read and write keys retained."""
    client.set_key(READ_KEY)
    client.set_key(WRITE_KEY)
    return client
