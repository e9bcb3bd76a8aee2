from odom.core.events import EventEngine
from odom.core.tracking_session import TrackingSession


def _titles(events):
    return [ev.title for ev in events]


def test_session_lifecycle_events(origin, east_of):
    session = TrackingSession()
    engine = EventEngine()

    assert engine.consume(session.snapshot()) == []

    session.start(0)
    events = engine.consume(session.snapshot())
    assert _titles(events) == ["Session started"]

    session.ingest(origin)
    session.ingest(east_of(origin, 250.0, 60_000))
    session.lap(now_ms=60_000)
    events = engine.consume(session.snapshot())
    assert _titles(events) == ["Lap 1 complete"]
    assert events[0].message == "Lap 1. 01:00. 250 m."

    # nothing new
    assert engine.consume(session.snapshot()) == []

    session.stop(now_ms=90_000)
    events = engine.consume(session.snapshot())
    assert _titles(events) == ["Lap 2 complete", "Session stopped"]
    assert events[1].message == "Session stopped. 01:30. 250 m."


def test_restart_numbers_laps_again():
    session = TrackingSession()
    engine = EventEngine()

    session.start(0)
    engine.consume(session.snapshot())
    session.lap(now_ms=1_000)
    session.stop(now_ms=2_000)
    events = engine.consume(session.snapshot())
    assert [ev.id for ev in events] == ["lap:1:1", "lap:1:2", "stop:1"]

    session.start(10_000)
    events = engine.consume(session.snapshot())
    assert _titles(events) == ["Session started"]

    session.lap(now_ms=11_000)
    events = engine.consume(session.snapshot())
    assert _titles(events) == ["Lap 1 complete"]
    assert events[0].id == "lap:2:1"


def test_gps_lost_and_restored(origin, east_of):
    session = TrackingSession()
    engine = EventEngine(stale_after_s=5.0)

    session.start(0)
    session.ingest(origin)
    engine.consume(session.snapshot(), now_ms=1_000)

    events = engine.consume(session.snapshot(), now_ms=7_000)
    assert _titles(events) == ["GPS signal lost"]
    # reported once per outage
    assert engine.consume(session.snapshot(), now_ms=9_000) == []

    session.ingest(east_of(origin, 20.0, 9_500))
    events = engine.consume(session.snapshot(), now_ms=10_000)
    assert _titles(events) == ["GPS signal restored"]


def test_no_gps_events_when_idle(origin):
    session = TrackingSession()
    engine = EventEngine(stale_after_s=1.0)
    session.ingest(origin)
    assert engine.consume(session.snapshot(), now_ms=60_000) == []


def test_gps_lost_when_no_fix_ever_arrives():
    session = TrackingSession()
    engine = EventEngine(stale_after_s=5.0)

    session.start(10_000)
    assert _titles(engine.consume(session.snapshot(), now_ms=12_000)) == ["Session started"]

    events = engine.consume(session.snapshot(), now_ms=16_000)
    assert _titles(events) == ["GPS signal lost"]
    assert events[0].id == "gps_lost:1:10000"
