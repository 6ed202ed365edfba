# src/core/geo/__init__.py
"""
Geo-утилиты.
Расстояние по большому кругу.
"""

from src.core.geo.distance import calculate_distance, to_radians

__all__ = [
    "calculate_distance",
    "to_radians",
]
