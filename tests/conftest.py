"""Shared fixtures for the tracking engine tests."""

import pytest

from odom.core.geo import Position, destination_point


@pytest.fixture
def origin() -> Position:
    return Position(latitude=0.0, longitude=0.0, timestamp=0)


@pytest.fixture
def east_of():
    """Factory: position `meters` due east of `pos`, stamped `timestamp`."""

    def _make(pos: Position, meters: float, timestamp: int = None) -> Position:
        return destination_point(pos, 90.0, meters, timestamp=timestamp)

    return _make
