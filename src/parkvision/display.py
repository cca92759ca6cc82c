"""Formatting helpers shared by presentation layers."""

from __future__ import annotations

from datetime import UTC, datetime

from parkvision._constants import DEFAULT_MAP_CENTER
from parkvision.models.facility import Spot
from parkvision.models.snapshot import Snapshot


def time_ago(moment: datetime, now: datetime | None = None) -> str:
    """Render the age of *moment* as ``"5s ago"``, ``"3m ago"`` or ``"2h ago"``."""
    now = now or datetime.now(UTC)
    seconds = max(0, int((now - moment).total_seconds()))
    if seconds < 60:
        return f"{seconds}s ago"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    return f"{minutes // 60}h ago"


def spot_status_label(spot: Spot) -> str:
    return "Occupied" if spot.occupied else "Free"


def format_distance(miles: float) -> str:
    return f"{miles:.1f} mi"


def format_price(price_per_hour: float) -> str:
    return f"${price_per_hour:.0f}/hr"


def map_center(snapshot: Snapshot | None) -> tuple[float, float]:
    """Initial map centre: the first facility, or a fixed default."""
    if snapshot is None or not snapshot.facilities:
        return DEFAULT_MAP_CENTER
    return snapshot.facilities[0].coordinate
