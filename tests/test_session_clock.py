import dataclasses

import pytest

from odom.core.distance import DistanceAccumulator
from odom.core.formatting import format_time
from odom.core.session_clock import Lap, Phase, SessionClock


@pytest.fixture
def clock() -> SessionClock:
    return SessionClock(DistanceAccumulator())


def test_starts_idle(clock):
    assert clock.phase is Phase.IDLE
    assert clock.elapsed_s == 0
    assert clock.laps == ()


def test_commands_before_start_are_ignored(clock):
    assert clock.tick(5000) == 0
    assert clock.record_lap(100.0) is None
    assert clock.stop(100.0) is None
    assert clock.phase is Phase.IDLE
    assert clock.laps == ()


def test_start_resets_accumulator(origin, east_of):
    acc = DistanceAccumulator()
    acc.ingest(origin)
    acc.ingest(east_of(origin, 100.0))
    assert acc.total_distance_m > 0

    clock = SessionClock(acc)
    assert clock.start(1_000)
    assert acc.total_distance_m == 0.0
    assert acc.last_accepted_position is None


def test_start_while_running_is_ignored(clock):
    clock.start(1_000)
    clock.tick(11_000)
    clock.record_lap(50.0)

    assert clock.start(20_000) is False
    assert clock.start_instant_ms == 1_000
    assert clock.elapsed_s == 10
    assert len(clock.laps) == 1


def test_tick_floors_to_whole_seconds(clock):
    clock.start(0)
    assert clock.tick(65_000) == 65
    assert format_time(clock.elapsed_s) == "01:05"
    assert clock.tick(65_999) == 65
    assert clock.tick(66_000) == 66


def test_tick_earlier_than_start_reads_zero(clock):
    clock.start(10_000)
    assert clock.tick(9_000) == 0


def test_lap_deltas(clock):
    clock.start(0)
    boundaries = [(30_000, 120.0), (75_000, 400.0), (75_000, 400.0), (140_000, 910.5)]
    for now, total in boundaries:
        clock.tick(now)
        clock.record_lap(total)

    laps = clock.laps
    assert [lap.lap_number for lap in laps] == [1, 2, 3, 4]

    prev_t, prev_d = 0, 0.0
    for lap in laps:
        assert lap.lap_time_s + prev_t == lap.cumulative_time_s
        assert lap.lap_distance_m + prev_d == pytest.approx(lap.cumulative_distance_m)
        assert lap.lap_time_s >= 0
        assert lap.lap_distance_m >= 0
        prev_t, prev_d = lap.cumulative_time_s, lap.cumulative_distance_m

    # empty lap between identical boundaries
    assert laps[2].lap_time_s == 0
    assert laps[2].lap_distance_m == 0.0


def test_stop_records_final_lap_and_freezes(clock):
    clock.start(0)
    clock.tick(20_000)
    clock.record_lap(100.0)
    clock.tick(50_000)

    final = clock.stop(260.0)
    assert final is not None
    assert final.lap_number == 2
    assert final.lap_time_s == 30
    assert final.lap_distance_m == pytest.approx(160.0)

    assert clock.phase is Phase.STOPPED
    assert clock.start_instant_ms is None
    assert clock.elapsed_s == 50

    # frozen
    assert clock.tick(90_000) == 50
    assert clock.record_lap(999.0) is None


def test_stop_without_movement_still_records_lap(clock):
    clock.start(0)
    clock.tick(3_000)
    clock.stop(0.0)
    assert len(clock.laps) == 1
    assert clock.laps[0].lap_distance_m == 0.0
    assert clock.laps[0].lap_time_s == 3


def test_second_stop_is_noop(clock):
    clock.start(0)
    clock.tick(12_000)
    clock.stop(42.0)
    laps = clock.laps
    elapsed = clock.elapsed_s

    assert clock.stop(99.0) is None
    assert clock.laps == laps
    assert clock.elapsed_s == elapsed


def test_restart_after_stop_clears_laps(clock):
    clock.start(0)
    clock.tick(5_000)
    clock.stop(10.0)

    assert clock.start(100_000)
    assert clock.phase is Phase.RUNNING
    assert clock.laps == ()
    assert clock.elapsed_s == 0
    assert clock.last_lap_time_s == 0
    assert clock.last_lap_distance_m == 0.0
    assert clock.tick(107_000) == 7


def test_laps_are_immutable(clock):
    clock.start(0)
    lap = clock.record_lap(10.0)
    assert isinstance(lap, Lap)
    with pytest.raises(dataclasses.FrozenInstanceError):
        lap.lap_distance_m = 0.0

    # the exposed sequence is a copy
    assert isinstance(clock.laps, tuple)


def test_clock_without_accumulator(origin):
    clock = SessionClock()
    assert clock.start(0)
    clock.tick(1_000)
    assert clock.record_lap(5.0).cumulative_time_s == 1
