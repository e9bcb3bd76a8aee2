# odom/core/geo.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict
import math

EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    timestamp: int  # ms since epoch

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def haversine_m(a: Position, b: Position) -> float:
    """
    Great-circle distance between two positions in meters (haversine on a sphere).

    Returns nan when a coordinate is not finite, so callers comparing against
    a threshold reject the sample.
    """
    coords = (a.latitude, a.longitude, b.latitude, b.longitude)
    if not all(math.isfinite(v) for v in coords):
        return math.nan

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    dphi = math.radians(b.latitude - a.latitude)
    dlmb = math.radians(b.longitude - a.longitude)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    # rounding can push near-antipodal pairs just past 1
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_M * c


def destination_point(origin: Position, bearing_deg: float, distance_m: float, timestamp: int | None = None) -> Position:
    """
    Point reached by travelling distance_m from origin along an initial bearing.
    Used to synthesize tracks (simulated source, tests).
    """
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    phi1 = math.radians(origin.latitude)
    lmb1 = math.radians(origin.longitude)

    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lmb2 = lmb1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )

    # normalize to [-180, 180)
    lon = (math.degrees(lmb2) + 540.0) % 360.0 - 180.0
    return Position(
        latitude=math.degrees(phi2),
        longitude=lon,
        timestamp=origin.timestamp if timestamp is None else int(timestamp),
    )
