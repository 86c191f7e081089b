"""Plain-text rendering of list pages and the dashboard."""

from __future__ import annotations

from collections.abc import Sequence

from trackmykid.models.dashboard import DashboardStats
from trackmykid.models.telemetry import TelemetryPoint
from trackmykid.pages.controller import ListPage

EMPTY_ROW = "No records found."


def _format_rows(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    widths = [len(h) for h in headers]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))
    lines = ["  ".join(h.ljust(w) for h, w in zip(headers, widths, strict=True)).rstrip()]
    lines.append("  ".join("-" * w for w in widths))
    for row in rows:
        lines.append("  ".join(c.ljust(w) for c, w in zip(row, widths, strict=True)).rstrip())
    return lines


def render_table(page: ListPage) -> str:
    """Render the visible rows of *page* with an error banner and pager."""
    lines: list[str] = [page.spec.title]
    if page.state.error:
        lines.append(f"Error: {page.state.error}")
    if page.state.loading:
        lines.append("Loading...")
    headers = [column.label for column in page.spec.columns]
    rows = [page.cells(record) for record in page.visible_rows]
    lines.extend(_format_rows(headers, rows))
    if not rows:
        lines.append(EMPTY_ROW)
    lines.append(page.pager_label)
    return "\n".join(lines)


def render_markers(markers: Sequence[TelemetryPoint], center: tuple[float, float]) -> str:
    lines = [f"Map center: {center[0]:.5f}, {center[1]:.5f}"]
    rows = [[m.display("device_id"), f"{m.lat:.5f}", f"{m.lng:.5f}", m.display("ts")] for m in markers]
    lines.extend(_format_rows(["Device", "Latitude", "Longitude", "Last seen"], rows))
    if not rows:
        lines.append("No located devices.")
    return "\n".join(lines)


def render_dashboard(stats: DashboardStats) -> str:
    cards = [
        ("Customers", stats.total_customers),
        ("Devices", stats.total_devices),
        ("Vehicles", stats.total_vehicles),
        ("Kids", stats.total_kids),
        ("Subscriptions", stats.total_subscriptions),
        ("Jobs", stats.total_jobs),
        ("Alerts", stats.total_alerts),
    ]
    return "\n".join(_format_rows(["Section", "Count"], [[title, str(count)] for title, count in cards]))
