from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from odom.core.formatting import format_distance, format_time


@dataclass
class TrackerEvent:
    id: str
    title: str
    message: str


class EventEngine:
    def __init__(self, stale_after_s: float = 5.0):
        self.stale_after_s = float(stale_after_s)

        self._prev_phase: Optional[str] = None
        self._prev_lap_count: int = 0
        self._gps_lost: bool = False
        self._session_no: int = 0

    def consume(self, snap: Dict[str, Any], now_ms: Optional[int] = None) -> List[TrackerEvent]:
        events: List[TrackerEvent] = []

        phase = snap.get("phase")
        laps = snap.get("laps") or []

        if phase == "running" and self._prev_phase != "running":
            self._session_no += 1
            self._prev_lap_count = 0
            self._gps_lost = False
            events.append(
                TrackerEvent(
                    id=f"start:{self._session_no}",
                    title="Session started",
                    message="Tracking started.",
                )
            )

        if len(laps) > self._prev_lap_count:
            for lap in laps[self._prev_lap_count:]:
                n = int(lap["lap_number"])
                lt = format_time(int(lap["lap_time_s"]))
                ld = format_distance(float(lap["lap_distance_m"]))
                events.append(
                    TrackerEvent(
                        id=f"lap:{self._session_no}:{n}",
                        title=f"Lap {n} complete",
                        message=f"Lap {n}. {lt}. {ld}.",
                    )
                )
        self._prev_lap_count = len(laps)

        if phase == "stopped" and self._prev_phase == "running":
            elapsed = snap.get("elapsed_str") or format_time(int(snap.get("elapsed_s") or 0))
            dist = snap.get("total_distance_str") or format_distance(float(snap.get("total_distance_m") or 0.0))
            events.append(
                TrackerEvent(
                    id=f"stop:{self._session_no}",
                    title="Session stopped",
                    message=f"Session stopped. {elapsed}. {dist}.",
                )
            )

        if phase == "running" and now_ms is not None:
            last_fix = snap.get("last_fix_ms")
            if last_fix is None:
                # no fix yet this session: measure from the start
                last_fix = snap.get("start_instant_ms")
            if last_fix is not None:
                age_s = (int(now_ms) - int(last_fix)) / 1000.0
                if age_s > self.stale_after_s and not self._gps_lost:
                    self._gps_lost = True
                    events.append(
                        TrackerEvent(
                            id=f"gps_lost:{self._session_no}:{last_fix}",
                            title="GPS signal lost",
                            message=f"No position update for {int(age_s)} seconds.",
                        )
                    )
                elif age_s <= self.stale_after_s and self._gps_lost:
                    self._gps_lost = False
                    events.append(
                        TrackerEvent(
                            id=f"gps_ok:{self._session_no}:{last_fix}",
                            title="GPS signal restored",
                            message="Position updates resumed.",
                        )
                    )

        self._prev_phase = phase
        return events
