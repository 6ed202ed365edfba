# tests/core/test_geo_distance.py
"""
Тесты для гео-утилит (src/core/geo/distance.py).
"""

from __future__ import annotations

import math

import pytest

from src.core.geo import calculate_distance, to_radians


SAN_FRANCISCO = (37.7749, -122.4194)
LOS_ANGELES = (34.0522, -118.2437)


class TestToRadians:
    """Тесты для to_radians."""

    def test_converts_degrees(self) -> None:
        assert to_radians(180) == pytest.approx(math.pi)
        assert to_radians(0) == 0


class TestCalculateDistance:
    """Тесты для calculate_distance (Haversine)."""

    def test_same_point_is_zero(self) -> None:
        """Расстояние от точки до себя равно нулю."""
        assert calculate_distance(*SAN_FRANCISCO, *SAN_FRANCISCO) == 0

    def test_symmetric(self) -> None:
        """Расстояние не зависит от порядка точек."""
        forward = calculate_distance(*SAN_FRANCISCO, *LOS_ANGELES)
        backward = calculate_distance(*LOS_ANGELES, *SAN_FRANCISCO)
        assert forward == pytest.approx(backward)

    def test_known_city_distance(self) -> None:
        """San Francisco -> Los Angeles около 559 км."""
        assert calculate_distance(*SAN_FRANCISCO, *LOS_ANGELES) == pytest.approx(559, abs=5)

    def test_one_degree_of_latitude(self) -> None:
        """Один градус по меридиану равен R * pi / 180."""
        expected = 6371.0 * math.pi / 180
        assert calculate_distance(0, 0, 1, 0) == pytest.approx(expected, rel=1e-9)

    def test_antipodes(self) -> None:
        """Противоположные точки на экваторе: половина окружности."""
        assert calculate_distance(0, 0, 0, 180) == pytest.approx(6371.0 * math.pi, rel=1e-9)

    def test_non_negative(self) -> None:
        assert calculate_distance(-45, 170, 45, -170) >= 0

    def test_monotonic_along_equator(self) -> None:
        """Дальше по экватору от (0, 0) значит дальше по расстоянию."""
        distances = [calculate_distance(0, 0, 0, k) for k in range(1, 180)]
        assert all(a < b for a, b in zip(distances, distances[1:]))
