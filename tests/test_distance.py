"""Unit tests for great-circle distance."""

import pytest

from ridehail.domain.distance import EARTH_RADIUS_KM, haversine_km


def test_same_point_is_zero():
    assert haversine_km(6.5774, 3.3212, 6.5774, 3.3212) == 0


def test_symmetric():
    a = haversine_km(6.5774, 3.3212, 6.4281, 3.4219)
    b = haversine_km(6.4281, 3.4219, 6.5774, 3.3212)
    assert a == pytest.approx(b)


def test_one_degree_of_latitude():
    assert haversine_km(0, 0, 1, 0) == pytest.approx(111.195, rel=1e-4)


def test_antipodes_are_half_circumference():
    assert haversine_km(0, 0, 0, 180) == pytest.approx(3.141592653589793 * EARTH_RADIUS_KM)
