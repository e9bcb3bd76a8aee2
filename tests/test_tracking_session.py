import math

import pytest

from odom.core.geo import Position
from odom.core.session_clock import Phase
from odom.core.tracking_session import TrackingSession


@pytest.fixture
def session() -> TrackingSession:
    return TrackingSession()


def test_scenario_accepts_11m_step(session, origin):
    session.start(0)
    session.ingest(origin)
    session.ingest(Position(latitude=0.0, longitude=0.0001, timestamp=1000))
    assert session.total_distance_m == pytest.approx(11.1, abs=0.05)


def test_scenario_rejects_3m_jitter(session, origin):
    session.start(0)
    session.ingest(origin)
    session.ingest(Position(latitude=0.0, longitude=0.00003, timestamp=1000))
    assert session.total_distance_m == 0.0
    assert session.distance.last_accepted_position == origin


def test_scenario_lap_then_stop(session, origin, east_of):
    session.start(0)
    session.ingest(origin)

    p1 = east_of(origin, 1500.0, 600_000)
    session.tick(600_000)
    session.ingest(p1)
    lap1 = session.lap()
    assert lap1.lap_number == 1
    assert lap1.lap_distance_m == pytest.approx(1500.0, abs=1e-6)
    assert lap1.lap_time_s == session.elapsed_s == 600

    p2 = east_of(p1, 500.0, 900_000)
    session.ingest(p2)
    session.tick(900_000)
    lap2 = session.stop()
    assert lap2.lap_number == 2
    assert lap2.lap_distance_m == pytest.approx(500.0, abs=1e-6)
    assert lap2.lap_time_s == 300
    assert lap2.cumulative_distance_m == pytest.approx(2000.0, abs=1e-6)
    assert session.phase is Phase.STOPPED
    assert [lap.lap_number for lap in session.laps()] == [1, 2]


def test_ingest_before_start_does_not_count(session, origin, east_of):
    assert session.ingest(origin) == 0.0
    assert session.ingest(east_of(origin, 100.0)) == 0.0
    assert session.distance.samples_seen == 0
    assert session.last_position() is not None


def test_distance_frozen_after_stop(session, origin, east_of):
    session.start(0)
    session.ingest(origin)
    session.ingest(east_of(origin, 40.0, 1000))
    session.stop(2000)
    frozen = session.total_distance_m

    session.ingest(east_of(origin, 400.0, 3000))
    assert session.total_distance_m == frozen


def test_start_resets_distance(session, origin, east_of):
    session.start(0)
    session.ingest(origin)
    session.ingest(east_of(origin, 40.0, 1000))
    session.stop(2000)

    session.start(10_000)
    assert session.total_distance_m == 0.0
    assert session.laps() == []
    # first sample of the new session is a fresh baseline
    session.ingest(east_of(origin, 5000.0, 11_000))
    assert session.total_distance_m == 0.0


def test_lap_and_stop_accept_a_clock(session):
    session.start(1_000)
    lap = session.lap(now_ms=31_500)
    assert lap.cumulative_time_s == 30
    final = session.stop(now_ms=45_000)
    assert final.lap_time_s == 14
    assert session.elapsed_s == 44


def test_lap_when_not_running_is_ignored(session):
    assert session.lap() is None
    assert session.stop() is None
    assert session.phase is Phase.IDLE


def test_double_stop(session, origin, east_of):
    session.start(0)
    session.ingest(origin)
    session.ingest(east_of(origin, 30.0, 1000))
    session.tick(9_000)
    session.stop()
    assert len(session.laps()) == 1
    elapsed = session.elapsed_s

    assert session.stop(now_ms=50_000) is None
    assert len(session.laps()) == 1
    assert session.elapsed_s == elapsed


def test_lap_callback(session):
    seen = []
    session.on_lap_recorded = lambda lap, s: seen.append((lap.lap_number, s))
    session.start(0)
    session.lap(now_ms=1_000)
    session.stop(now_ms=2_000)
    assert [n for n, _ in seen] == [1, 2]
    assert all(s is session for _, s in seen)


def test_lap_callback_errors_do_not_break_session(session, capsys):
    def boom(lap, s):
        raise RuntimeError("nope")

    session.on_lap_recorded = boom
    session.start(0)
    lap = session.lap(now_ms=1_000)
    assert lap is not None
    assert len(session.laps()) == 1
    assert "[session] lap callback error" in capsys.readouterr().out


def test_snapshot(session, origin, east_of):
    session.start(0)
    session.ingest(origin)
    last = east_of(origin, 1234.0, 65_000)
    session.ingest(last)
    session.tick(65_000)
    session.lap()

    snap = session.snapshot()
    assert snap["phase"] == "running"
    assert snap["running"] is True
    assert snap["elapsed_s"] == 65
    assert snap["elapsed_str"] == "01:05"
    assert snap["total_distance_m"] == pytest.approx(1234.0, abs=1e-6)
    assert snap["total_distance_str"] == "1.23 km"
    assert snap["lap_count"] == 1
    assert snap["laps"][0]["lap_number"] == 1
    assert snap["last_position"]["latitude"] == pytest.approx(last.latitude)
    assert snap["last_fix_ms"] == 65_000
    assert snap["samples_seen"] == 2
    assert snap["samples_rejected"] == 0

    session.stop()
    snap = session.snapshot()
    assert snap["phase"] == "stopped"
    assert snap["last_position"] is None


def test_non_finite_sample_is_ignored(origin, east_of):
    session = TrackingSession()
    session.start(0)
    session.ingest(origin)
    assert session.ingest(Position(latitude=math.inf, longitude=0.0, timestamp=1000)) == 0.0
    # later samples still count from the anchor
    assert session.ingest(east_of(origin, 20.0, 2000)) == pytest.approx(20.0, abs=1e-6)
    assert session.snapshot()["samples_rejected"] == 1


def test_snapshot_carries_start_instant():
    session = TrackingSession()
    assert session.snapshot()["start_instant_ms"] is None
    session.start(42_000)
    snap = session.snapshot()
    assert snap["start_instant_ms"] == 42_000
    assert snap["last_fix_ms"] is None
