# src/core/__init__.py
"""
Доменный слой (Core Domain).
Чистая бизнес-логика без HTTP и инфраструктуры.
"""

from src.core.tracking import LocationTrackingService, LocationPoint

__all__ = [
    "LocationTrackingService",
    "LocationPoint",
]
