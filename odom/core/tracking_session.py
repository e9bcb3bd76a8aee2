# odom/core/tracking_session.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from odom.core.distance import DistanceAccumulator, NOISE_THRESHOLD_M
from odom.core.formatting import format_distance, format_time
from odom.core.geo import Position
from odom.core.session_clock import Lap, Phase, SessionClock


class TrackingSession:
    """
    Engine facade: one DistanceAccumulator + one SessionClock.

    The host feeds it from a single thread:
      - ingest(position) for every position sample, in arrival order
      - tick(now_ms) on a fixed cadence (nominally 1 Hz)
      - start / lap / stop from the user

    and reads snapshot() after each call to render.
    """

    def __init__(self, noise_threshold_m: float = NOISE_THRESHOLD_M):
        self.distance = DistanceAccumulator(noise_threshold_m=noise_threshold_m)
        self.clock = SessionClock(self.distance)

        # last raw sample seen, accepted or not (debug readout)
        self._last_position: Optional[Position] = None

        # optional hook: fn(lap, session)
        self.on_lap_recorded: Optional[Callable[[Lap, "TrackingSession"], None]] = None

    #public API
    @property
    def phase(self) -> Phase:
        return self.clock.phase

    @property
    def is_running(self) -> bool:
        return self.clock.is_running

    @property
    def elapsed_s(self) -> int:
        return self.clock.elapsed_s

    @property
    def total_distance_m(self) -> float:
        return self.distance.total_distance_m

    def laps(self) -> List[Lap]:
        return list(self.clock.laps)

    def last_position(self) -> Optional[Position]:
        return self._last_position

    #commands
    def start(self, now_ms: int) -> bool:
        started = self.clock.start(now_ms)
        if started:
            self._last_position = None
        return started

    def ingest(self, position: Position) -> float:
        self._last_position = position
        # total is frozen outside a running session
        if not self.clock.is_running:
            return self.distance.total_distance_m
        return self.distance.ingest(position)

    def tick(self, now_ms: int) -> int:
        return self.clock.tick(now_ms)

    def lap(self, now_ms: Optional[int] = None) -> Optional[Lap]:
        if now_ms is not None:
            self.clock.tick(now_ms)
        lap = self.clock.record_lap(self.distance.total_distance_m)
        self._notify(lap)
        return lap

    def stop(self, now_ms: Optional[int] = None) -> Optional[Lap]:
        if now_ms is not None:
            self.clock.tick(now_ms)
        lap = self.clock.stop(self.distance.total_distance_m)
        if lap is not None:
            self._last_position = None
        self._notify(lap)
        return lap

    def _notify(self, lap: Optional[Lap]) -> None:
        if lap is None or self.on_lap_recorded is None:
            return
        try:
            self.on_lap_recorded(lap, self)
        except Exception as e:
            print(f"[session] lap callback error: {e!r}")

    #read side
    def snapshot(self) -> Dict[str, Any]:
        pos = self._last_position
        total = self.distance.total_distance_m
        elapsed = self.clock.elapsed_s
        laps = self.clock.laps
        return {
            "phase": self.clock.phase.value,
            "running": self.clock.is_running,
            "start_instant_ms": self.clock.start_instant_ms,
            "elapsed_s": elapsed,
            "elapsed_str": format_time(elapsed),
            "total_distance_m": total,
            "total_distance_str": format_distance(total),
            "laps": [lap.to_dict() for lap in laps],
            "lap_count": len(laps),
            "last_position": pos.to_dict() if pos is not None else None,
            "last_fix_ms": pos.timestamp if pos is not None else None,
            "samples_seen": self.distance.samples_seen,
            "samples_rejected": self.distance.samples_rejected,
        }
