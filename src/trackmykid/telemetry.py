"""Map markers from telemetry points.

The map shows one marker per device at its most recent known position.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from trackmykid.models.telemetry import TelemetryPoint
from trackmykid.pages.controller import ApiClient, ConfirmCallback, ListPage
from trackmykid.pages.entities import TELEMETRY


def _is_newer(incoming: datetime | None, current: datetime | None) -> bool:
    """Whether a point stamped *incoming* replaces one stamped *current*.

    Equal timestamps replace (last seen wins); an unparseable timestamp
    never beats a parseable one.
    """
    if incoming is None:
        return current is None
    if current is None:
        return True
    return incoming >= current


def latest_positions(points: Iterable[TelemetryPoint]) -> list[TelemetryPoint]:
    """Reduce *points* to the latest located point per device.

    Points without both coordinates are skipped; ``(0, 0)`` counts as a
    position.  Devices appear in the order they were first seen.
    """
    latest: dict[str, TelemetryPoint] = {}
    stamps: dict[str, datetime | None] = {}
    for point in points:
        if not point.has_coords:
            continue
        key = point.device_id if point.device_id is not None else ""
        stamp = point.timestamp
        if key not in latest or _is_newer(stamp, stamps[key]):
            latest[key] = point
            stamps[key] = stamp
    return list(latest.values())


def map_center(points: Iterable[TelemetryPoint]) -> tuple[float, float]:
    """Mean position of the located points, ``(0, 0)`` when there are none."""
    located = [p for p in points if p.has_coords]
    if not located:
        return (0.0, 0.0)
    lat = sum(p.lat for p in located if p.lat is not None) / len(located)
    lng = sum(p.lng for p in located if p.lng is not None) / len(located)
    return (lat, lng)


class TelemetryMap(ListPage):
    """Telemetry list page plus the markers for its visible rows."""

    def __init__(
        self,
        client: ApiClient,
        *,
        per_page: int | None = None,
        confirm: ConfirmCallback | None = None,
    ) -> None:
        super().__init__(client, TELEMETRY, per_page=per_page, confirm=confirm)

    @property
    def markers(self) -> list[TelemetryPoint]:
        return latest_positions(p for p in self.visible_rows if isinstance(p, TelemetryPoint))

    @property
    def center(self) -> tuple[float, float]:
        return map_center(p for p in self.visible_rows if isinstance(p, TelemetryPoint))
