# odom/core/session_clock.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from odom.core.distance import DistanceAccumulator
from odom.core.formatting import format_distance, format_time


class Phase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Lap:
    lap_number: int
    cumulative_time_s: int
    cumulative_distance_m: float
    lap_time_s: int
    lap_distance_m: float

    @property
    def time_str(self) -> str:
        return format_time(self.cumulative_time_s)

    @property
    def lap_time_str(self) -> str:
        return format_time(self.lap_time_s)

    @property
    def distance_str(self) -> str:
        return format_distance(self.cumulative_distance_m)

    @property
    def lap_distance_str(self) -> str:
        return format_distance(self.lap_distance_m)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lap_number": self.lap_number,
            "cumulative_time_s": self.cumulative_time_s,
            "cumulative_distance_m": self.cumulative_distance_m,
            "lap_time_s": self.lap_time_s,
            "lap_distance_m": self.lap_distance_m,
        }


class SessionClock:
    """
    Session lifecycle, elapsed time and lap segmentation.

    Idle -> Running -> Stopped -> Running ...

    The clock never reads the wall clock: every time-dependent call takes
    `now_ms` from the caller. Distance is passed in explicitly by the caller
    (normally the accumulator total) rather than read from the accumulator.
    Calls made in the wrong phase are ignored.
    """

    def __init__(self, accumulator: Optional[DistanceAccumulator] = None):
        self._accumulator = accumulator

        self.phase: Phase = Phase.IDLE
        self.start_instant_ms: Optional[int] = None
        self.elapsed_s: int = 0

        self.last_lap_time_s: int = 0
        self.last_lap_distance_m: float = 0.0
        self._laps: List[Lap] = []

    @property
    def is_running(self) -> bool:
        return self.phase is Phase.RUNNING

    @property
    def laps(self) -> Tuple[Lap, ...]:
        return tuple(self._laps)

    def start(self, now_ms: int) -> bool:
        if self.phase is Phase.RUNNING:
            return False

        self.phase = Phase.RUNNING
        self.start_instant_ms = int(now_ms)
        self.elapsed_s = 0
        self._laps = []
        self.last_lap_time_s = 0
        self.last_lap_distance_m = 0.0

        if self._accumulator is not None:
            self._accumulator.reset()
        return True

    def tick(self, now_ms: int) -> int:
        if self.phase is not Phase.RUNNING or self.start_instant_ms is None:
            return self.elapsed_s
        # floor division; clamp so a clock earlier than start reads 0
        self.elapsed_s = max(0, (int(now_ms) - self.start_instant_ms) // 1000)
        return self.elapsed_s

    def record_lap(self, current_total_m: float) -> Optional[Lap]:
        if self.phase is not Phase.RUNNING:
            return None

        lap = Lap(
            lap_number=len(self._laps) + 1,
            cumulative_time_s=self.elapsed_s,
            cumulative_distance_m=float(current_total_m),
            lap_time_s=self.elapsed_s - self.last_lap_time_s,
            lap_distance_m=float(current_total_m) - self.last_lap_distance_m,
        )
        self._laps.append(lap)

        self.last_lap_time_s = self.elapsed_s
        self.last_lap_distance_m = float(current_total_m)
        return lap

    def stop(self, current_total_m: float) -> Optional[Lap]:
        if self.phase is not Phase.RUNNING:
            return None

        # final partial segment becomes the last lap
        lap = self.record_lap(current_total_m)

        self.phase = Phase.STOPPED
        self.start_instant_ms = None
        return lap
