from __future__ import annotations

from .geo import Position, haversine_m, destination_point, EARTH_RADIUS_M
from .distance import DistanceAccumulator, NOISE_THRESHOLD_M
from .session_clock import Lap, Phase, SessionClock
from .tracking_session import TrackingSession
from .formatting import format_time, format_distance, format_clock_ms
from .events import EventEngine, TrackerEvent
from .config import OdomConfig, load_config

__all__ = [
    # geometry
    "Position",
    "haversine_m",
    "destination_point",
    "EARTH_RADIUS_M",
    # engine
    "DistanceAccumulator",
    "NOISE_THRESHOLD_M",
    "Lap",
    "Phase",
    "SessionClock",
    "TrackingSession",
    # presentation
    "format_time",
    "format_distance",
    "format_clock_ms",
    "EventEngine",
    "TrackerEvent",
    # config
    "OdomConfig",
    "load_config",
]
