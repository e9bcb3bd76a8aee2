# odom/core/distance.py
from __future__ import annotations

from typing import Optional

from odom.core.geo import Position, haversine_m

NOISE_THRESHOLD_M = 5.0


class DistanceAccumulator:
    """
    Running great-circle distance over a stream of position samples.

    Samples must arrive in order. Movements of noise_threshold_m or less are
    treated as GPS jitter: they add nothing and do not move the anchor, so the
    next sample is still measured from the last accepted position.
    """

    def __init__(self, noise_threshold_m: float = NOISE_THRESHOLD_M):
        self.noise_threshold_m = float(noise_threshold_m)

        self._anchor: Optional[Position] = None
        self._total_m: float = 0.0

        # diagnostics only
        self._seen: int = 0
        self._rejected: int = 0

    @property
    def total_distance_m(self) -> float:
        return self._total_m

    @property
    def last_accepted_position(self) -> Optional[Position]:
        return self._anchor

    @property
    def samples_seen(self) -> int:
        return self._seen

    @property
    def samples_rejected(self) -> int:
        return self._rejected

    def reset(self) -> None:
        self._anchor = None
        self._total_m = 0.0
        self._seen = 0
        self._rejected = 0

    def ingest(self, sample: Position) -> float:
        self._seen += 1

        # first sample is the baseline
        if self._anchor is None:
            self._anchor = sample
            return self._total_m

        d = haversine_m(self._anchor, sample)
        if d > self.noise_threshold_m:
            self._total_m += d
            self._anchor = sample
        else:
            self._rejected += 1

        return self._total_m
