# src/core/geo/distance.py
"""
Геометрия на сфере: расстояние по формуле Haversine.
"""

from __future__ import annotations

import math

from src.common.constants import EARTH_RADIUS_KM


def to_radians(degrees: float) -> float:
    """Градусы -> радианы."""
    return degrees * (math.pi / 180)


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Вычисляет расстояние между двумя точками (в км) по формуле Haversine.

    Симметрична по аргументам, для совпадающих точек возвращает 0.
    """
    dlat = to_radians(lat2 - lat1)
    dlng = to_radians(lng2 - lng1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(to_radians(lat1)) * math.cos(to_radians(lat2)) *
         math.sin(dlng / 2) ** 2)

    # Погрешность округления может дать a чуть больше 1 для антиподов
    a = min(1.0, max(0.0, a))

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c
