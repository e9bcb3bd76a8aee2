# scripts/replay_track.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path so `import odom...` works
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from odom.core.config import load_config
from odom.core.formatting import format_distance, format_time
from odom.core.tracking_session import TrackingSession
from odom.location.position_source import PositionError
from odom.location.replay import load_track, replay_track
from odom.location.simulated import SimulatedPositionSource


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        description="Replay a recorded track through the tracking session and print time, distance and laps"
    )
    ap.add_argument(
        "track",
        type=Path,
        nargs="?",
        default=None,
        help="CSV with latitude/longitude (or lat/lon) and optional timestamp (ms) columns",
    )
    ap.add_argument(
        "--lap-every",
        type=float,
        default=None,
        help="Record a lap each time this many meters have been covered since the last lap",
    )
    ap.add_argument(
        "--noise-threshold",
        type=float,
        default=None,
        help="Override the jitter threshold in meters (default from ODOM_NOISE_THRESHOLD_M or 5)",
    )
    ap.add_argument(
        "--simulate",
        type=int,
        default=None,
        metavar="N",
        help="Replay N samples of the simulated walk instead of a file",
    )
    ap.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for --simulate",
    )

    args = ap.parse_args(argv)
    cfg = load_config()

    if args.simulate is not None:
        sim = SimulatedPositionSource(
            center=cfg.sim_center,
            radius_m=cfg.sim_radius_m,
            speed_mps=cfg.sim_speed_mps,
            jitter_m=cfg.sim_jitter_m,
            interval_s=cfg.sim_interval_s,
            seed=args.seed,
        )
        positions = sim.generate(args.simulate)
    elif args.track is not None:
        try:
            positions = load_track(args.track)
        except (PositionError, ValueError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
    else:
        print("ERROR: give a track file or --simulate N", file=sys.stderr)
        return 1

    threshold = args.noise_threshold if args.noise_threshold is not None else cfg.noise_threshold_m
    session = TrackingSession(noise_threshold_m=threshold)
    snap = replay_track(session, positions, lap_every_m=args.lap_every)

    print("[replay] Session complete")
    print(f"  samples: {snap['samples_seen']} (rejected as jitter: {snap['samples_rejected']})")
    print(f"  time: {snap['elapsed_str']}")
    print(f"  distance: {snap['total_distance_str']}")
    for lap in snap["laps"]:
        print(
            f"  Lap {lap['lap_number']}: {format_time(lap['cumulative_time_s'])}"
            f"  +{format_distance(lap['lap_distance_m'])}  +{format_time(lap['lap_time_s'])}"
        )

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
