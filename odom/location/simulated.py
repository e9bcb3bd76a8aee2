# odom/location/simulated.py
from __future__ import annotations

import math
from typing import List, Optional, Tuple

import numpy as np

from odom.core.geo import Position, destination_point
from odom.location.position_source import PositionSource, now_ms


class SimulatedPositionSource(PositionSource):
    """
    Walks a circle around `center` at constant speed, one fix per interval,
    with gaussian horizontal jitter (meters, per axis).
    """

    def __init__(
        self,
        center: Tuple[float, float] = (48.8566, 2.3522),
        radius_m: float = 200.0,
        speed_mps: float = 3.0,
        jitter_m: float = 1.5,
        interval_s: float = 1.0,
        seed: Optional[int] = None,
    ):
        super().__init__(name="simulated-position")
        self.center = Position(latitude=float(center[0]), longitude=float(center[1]), timestamp=0)
        self.radius_m = max(1.0, float(radius_m))
        self.speed_mps = max(0.0, float(speed_mps))
        self.jitter_m = max(0.0, float(jitter_m))
        self.interval_s = max(0.05, float(interval_s))

        self._rng = np.random.default_rng(seed)
        self._step = 0

    def position_at(self, step: int, timestamp: int) -> Position:
        # angle swept along the circle after `step` intervals
        arc_m = self.speed_mps * self.interval_s * step
        bearing = math.degrees(arc_m / self.radius_m) % 360.0
        true_pos = destination_point(self.center, bearing, self.radius_m, timestamp=timestamp)

        if self.jitter_m <= 0:
            return true_pos

        north, east = self._rng.normal(0.0, self.jitter_m, size=2)
        offset = float(np.hypot(north, east))
        if offset < 1e-9:
            return true_pos
        jitter_bearing = float(np.degrees(np.arctan2(east, north)))
        return destination_point(true_pos, jitter_bearing, offset, timestamp=timestamp)

    def generate(self, n: int, start_ms: int = 0) -> List[Position]:
        step_ms = int(round(self.interval_s * 1000))
        return [self.position_at(i, start_ms + i * step_ms) for i in range(max(0, int(n)))]

    def _next_position(self) -> Optional[Tuple[Position, float]]:
        pos = self.position_at(self._step, now_ms())
        self._step += 1
        return pos, self.interval_s
