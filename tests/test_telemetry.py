from __future__ import annotations

from typing import Any

import pytest

from trackmykid.config import CrmConfig
from trackmykid.models import TelemetryPoint
from trackmykid.render import render_markers
from trackmykid.session import SessionContext
from trackmykid.telemetry import TelemetryMap, latest_positions, map_center


def _point(**values: Any) -> TelemetryPoint:
    return TelemetryPoint.model_validate(values)


def test_latest_point_per_device_wins() -> None:
    points = [
        _point(id=1, deviceId="D1", lat=1, lng=1, ts="2024-01-01T00:00:00Z"),
        _point(id=2, deviceId="D1", lat=2, lng=2, ts="2024-01-02T00:00:00Z"),
        _point(id=3, deviceId="D2", lat=5, lng=5, ts="2024-01-01T00:00:00Z"),
    ]

    markers = latest_positions(points)

    assert [(m.device_id, m.id) for m in markers] == [("D1", 2), ("D2", 3)]


def test_older_point_after_newer_does_not_replace() -> None:
    points = [
        _point(id=2, deviceId="D1", lat=2, lng=2, ts="2024-01-02T00:00:00Z"),
        _point(id=1, deviceId="D1", lat=1, lng=1, ts="2024-01-01T00:00:00Z"),
    ]

    assert [m.id for m in latest_positions(points)] == [2]


def test_equal_timestamps_keep_last_seen() -> None:
    points = [
        _point(id=1, deviceId="D1", lat=1, lng=1, ts="2024-01-01T00:00:00Z"),
        _point(id=2, deviceId="D1", lat=2, lng=2, ts="2024-01-01T00:00:00+00:00"),
    ]

    assert [m.id for m in latest_positions(points)] == [2]


def test_zero_zero_is_a_position() -> None:
    markers = latest_positions([_point(id=1, deviceId="D1", lat=0, lng=0, ts="2024-01-01T00:00:00Z")])

    assert len(markers) == 1
    assert (markers[0].lat, markers[0].lng) == (0.0, 0.0)


def test_points_without_coordinates_are_skipped() -> None:
    points = [
        _point(id=1, deviceId="D1", lat=None, lng=3),
        _point(id=2, deviceId="D2", latitude="abc", longitude=4),
        _point(id=3, deviceId="D3", latitude="12.5", lon="77.1"),
    ]

    markers = latest_positions(points)

    assert [m.device_id for m in markers] == ["D3"]
    assert markers[0].lat == pytest.approx(12.5)


def test_unparseable_timestamp_never_beats_parseable() -> None:
    points = [
        _point(id=1, deviceId="D1", lat=1, lng=1, ts="2024-01-01T00:00:00Z"),
        _point(id=2, deviceId="D1", lat=2, lng=2, ts="not a date"),
        _point(id=3, deviceId="D2", lat=3, lng=3, ts="garbage"),
        _point(id=4, deviceId="D2", lat=4, lng=4, ts=1_704_067_200_000),
    ]

    assert [m.id for m in latest_positions(points)] == [1, 4]


def test_missing_device_id_groups_together() -> None:
    points = [
        _point(id=1, lat=1, lng=1, ts="2024-01-01T00:00:00Z"),
        _point(id=2, lat=2, lng=2, ts="2024-01-03T00:00:00Z"),
    ]

    assert [m.id for m in latest_positions(points)] == [2]


def test_map_center() -> None:
    assert map_center([]) == (0.0, 0.0)
    center = map_center([_point(lat=10, lng=20), _point(lat=20, lng=40), _point(lat=None, lng=1)])
    assert center == (15.0, 30.0)


class _TelemetryClient:
    def __init__(self, response: Any) -> None:
        self.config = CrmConfig()
        self.context = SessionContext()
        self.response = response
        self.endpoints: list[str] = []

    async def get(self, endpoint: str, params: Any = None) -> Any:
        self.endpoints.append(endpoint)
        return self.response

    async def post(self, endpoint: str, body: Any = None) -> Any:
        raise AssertionError("unexpected POST")

    async def put(self, endpoint: str, body: Any = None) -> Any:
        raise AssertionError("unexpected PUT")

    async def delete(self, endpoint: str) -> Any:
        raise AssertionError("unexpected DELETE")


@pytest.mark.asyncio
async def test_telemetry_map_markers_follow_visible_rows() -> None:
    client = _TelemetryClient(
        {
            "data": [
                {"id": 1, "deviceId": "D1", "lat": 1, "lng": 1, "timestamp": "2024-01-01T00:00:00Z"},
                {"id": 2, "deviceId": "D1", "lat": 3, "lng": 3, "timestamp": "2024-01-02T00:00:00Z"},
                {"id": 3, "deviceId": "D2", "lat": 5, "lng": 5, "timestamp": "2024-01-02T00:00:00Z"},
            ],
            "totalPages": 1,
        }
    )
    page = TelemetryMap(client)
    await page.fetch()

    assert client.endpoints == ["/api/telemetry"]
    assert [m.id for m in page.markers] == [2, 3]
    assert page.center == (3.0, 3.0)

    page.state.query = "d2"
    assert [m.id for m in page.markers] == [3]
    rendered = render_markers(page.markers, page.center)
    assert "D2" in rendered
    assert "5.00000" in rendered
