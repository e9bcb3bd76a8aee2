# odom/location/replay.py
from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from odom.core.geo import Position
from odom.core.tracking_session import TrackingSession
from odom.location.position_source import PositionError, PositionErrorCode, PositionSource, now_ms

_LAT_COLUMNS = ("latitude", "lat")
_LON_COLUMNS = ("longitude", "lon", "lng")
_TS_COLUMNS = ("timestamp", "timestamp_ms", "t_ms", "time_ms")


def _pick(cols: Dict[str, str], names: Sequence[str]) -> Optional[str]:
    for n in names:
        if n in cols:
            return cols[n]
    return None


def load_track(path: Path | str, default_interval_ms: int = 1000) -> List[Position]:
    """
    Load a recorded track from CSV.

    Columns (case-insensitive): latitude/lat, longitude/lon/lng and an optional
    timestamp in ms. Without timestamps, samples are spaced default_interval_ms
    apart starting at 0. Rows with unparseable values are dropped.

    Raises:
        PositionError: POSITION_UNAVAILABLE if the file does not exist.
        ValueError: if required columns are missing or no usable row remains.
    """
    p = Path(path).expanduser()
    if not p.exists():
        raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE, f"track file not found: {p}")

    df = pd.read_csv(p)
    cols = {str(c).strip().lower(): c for c in df.columns}
    lat_col = _pick(cols, _LAT_COLUMNS)
    lon_col = _pick(cols, _LON_COLUMNS)
    if lat_col is None or lon_col is None:
        raise ValueError(f"{p.name}: expected latitude/longitude (or lat/lon) columns, got {list(df.columns)}")

    out = pd.DataFrame(
        {
            "latitude": pd.to_numeric(df[lat_col], errors="coerce"),
            "longitude": pd.to_numeric(df[lon_col], errors="coerce"),
        }
    )
    ts_col = _pick(cols, _TS_COLUMNS)
    if ts_col is not None:
        out["timestamp"] = pd.to_numeric(df[ts_col], errors="coerce")
    else:
        out["timestamp"] = np.arange(len(out), dtype=np.int64) * int(default_interval_ms)

    out = out.dropna()
    if out.empty:
        raise ValueError(f"{p.name}: parsed track is empty. Check data file.")

    return [
        Position(latitude=float(r.latitude), longitude=float(r.longitude), timestamp=int(r.timestamp))
        for r in out.itertuples(index=False)
    ]


def replay_track(
    session: TrackingSession,
    positions: Sequence[Position],
    lap_every_m: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Drive a session from recorded samples using their timestamps as the clock.

    Starts at the first sample, ticks and ingests each sample in order, records
    a lap whenever the distance since the previous lap boundary reaches
    lap_every_m, and stops at the last sample. Returns the final snapshot.
    """
    if not positions:
        return session.snapshot()

    session.start(positions[0].timestamp)
    for pos in positions:
        session.tick(pos.timestamp)
        session.ingest(pos)
        if lap_every_m and lap_every_m > 0:
            since_lap = session.total_distance_m - session.clock.last_lap_distance_m
            if since_lap >= lap_every_m:
                session.lap()

    session.stop(positions[-1].timestamp)
    return session.snapshot()


class ReplayPositionSource(PositionSource):
    """
    Plays a recorded track back in real time (scaled by `speed`).

    Samples are re-stamped with the wall clock on emission, the way a live
    receiver would stamp them.
    """

    def __init__(
        self,
        path: Optional[Path | str] = None,
        positions: Optional[Sequence[Position]] = None,
        speed: float = 1.0,
        loop: bool = False,
    ):
        super().__init__(name="replay-position")
        self.path = Path(path) if path is not None else None
        self.speed = max(0.01, float(speed))
        self.loop = bool(loop)

        self._track: Optional[List[Position]] = list(positions) if positions is not None else None
        self._i = 0

    def _ensure_track(self) -> List[Position]:
        if self._track is None:
            if self.path is None:
                raise PositionError(PositionErrorCode.POSITION_UNAVAILABLE, "no replay track configured")
            self._track = load_track(self.path)
            print(f"[replay] loaded {len(self._track)} samples from {self.path}")
        return self._track

    def _next_position(self) -> Optional[Tuple[Position, float]]:
        track = self._ensure_track()
        if not track:
            return None
        if self._i >= len(track):
            if not self.loop:
                return None
            self._i = 0

        cur = track[self._i]
        self._i += 1

        delay_s = 0.0
        if self._i < len(track):
            delay_s = max(0.0, (track[self._i].timestamp - cur.timestamp) / 1000.0 / self.speed)

        return replace(cur, timestamp=now_ms()), delay_s
