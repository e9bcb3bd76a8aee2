# odom/core/formatting.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP


def _fixed(value: float, places: int) -> str:
    # half-up on the exact binary value, same as JS toFixed
    q = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(q, rounding=ROUND_HALF_UP))


def format_time(seconds: int) -> str:
    seconds = int(seconds)
    hrs = seconds // 3600
    mins = (seconds % 3600) // 60
    secs = seconds % 60
    if hrs > 0:
        return f"{hrs:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def format_distance(meters: float) -> str:
    if meters >= 1000:
        return f"{_fixed(meters / 1000, 2)} km"
    return f"{_fixed(meters, 0)} m"


def format_clock_ms(ms: int) -> str:
    """Local wall-clock time of a ms timestamp, HH:MM:SS.mmm."""
    dt = datetime.fromtimestamp(ms / 1000.0)
    return dt.strftime("%H:%M:%S.") + f"{dt.microsecond // 1000:03d}"
