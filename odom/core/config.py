# odom/core/config.py
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional, Tuple


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip().lower()
    return v in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not str(v).strip():
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or not str(v).strip():
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_latlon(name: str, default: Tuple[float, float]) -> Tuple[float, float]:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    items = [x.strip() for x in v.split(",") if x.strip()]
    if len(items) != 2:
        return default
    try:
        return (float(items[0]), float(items[1]))
    except ValueError:
        return default


SOURCES = ("simulated", "replay")


@dataclass(frozen=True)
class OdomConfig:
    noise_threshold_m: float = 5.0

    # host cadence
    tick_interval_ms: int = 1000
    poll_interval_ms: int = 100

    # position feed
    fix_timeout_s: float = 10.0
    stale_after_s: float = 5.0
    source: str = "simulated"
    replay_path: Optional[str] = None
    replay_speed: float = 1.0

    # simulated walk
    sim_center: Tuple[float, float] = (48.8566, 2.3522)
    sim_radius_m: float = 200.0
    sim_speed_mps: float = 3.0
    sim_jitter_m: float = 1.5
    sim_interval_s: float = 1.0

    debug: bool = False


def load_config() -> OdomConfig:
    source = (os.getenv("ODOM_SOURCE") or "simulated").strip().lower()
    if source not in SOURCES:
        source = "simulated"

    return OdomConfig(
        noise_threshold_m=_env_float("ODOM_NOISE_THRESHOLD_M", 5.0),
        tick_interval_ms=max(1, _env_int("ODOM_TICK_INTERVAL_MS", 1000)),
        poll_interval_ms=max(1, _env_int("ODOM_POLL_INTERVAL_MS", 100)),
        fix_timeout_s=_env_float("ODOM_FIX_TIMEOUT_S", 10.0),
        stale_after_s=_env_float("ODOM_STALE_AFTER_S", 5.0),
        source=source,
        replay_path=(os.getenv("ODOM_REPLAY_PATH") or "").strip() or None,
        replay_speed=_env_float("ODOM_REPLAY_SPEED", 1.0),
        sim_center=_env_latlon("ODOM_SIM_CENTER", (48.8566, 2.3522)),
        sim_radius_m=_env_float("ODOM_SIM_RADIUS_M", 200.0),
        sim_speed_mps=_env_float("ODOM_SIM_SPEED_MPS", 3.0),
        sim_jitter_m=_env_float("ODOM_SIM_JITTER_M", 1.5),
        sim_interval_s=_env_float("ODOM_SIM_INTERVAL_S", 1.0),
        debug=_env_bool("ODOM_DEBUG", False),
    )
