import math

import pytest

from src.geofence_attendance.geofence_attendance.common.geo import haversine_distance
from src.geofence_attendance.geofence_attendance.core.constants import EARTH_RADIUS_METERS


def test_zero_distance():
    assert haversine_distance(28.6139, 77.2090, 28.6139, 77.2090) == 0.0


def test_antipodal_points_do_not_produce_nan():
    d = haversine_distance(0.0, 0.0, 0.0, 180.0)

    assert not math.isnan(d)
    assert d == pytest.approx(math.pi * EARTH_RADIUS_METERS, rel=1e-9)


def test_pole_to_pole():
    d = haversine_distance(90.0, 0.0, -90.0, 0.0)

    assert d == pytest.approx(math.pi * EARTH_RADIUS_METERS, rel=1e-9)


def test_small_northward_offset():
    lat2 = 28.6139 + math.degrees(45 / EARTH_RADIUS_METERS)

    assert haversine_distance(28.6139, 77.2090, lat2, 77.2090) == pytest.approx(45.0, abs=1e-6)


def test_symmetric():
    a = haversine_distance(28.6139, 77.2090, 19.0760, 72.8777)
    b = haversine_distance(19.0760, 72.8777, 28.6139, 77.2090)

    assert a == pytest.approx(b)
    # Delhi to Mumbai is roughly 1,150 km as the crow flies.
    assert 1_100_000 < a < 1_200_000
