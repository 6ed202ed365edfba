# src/core/tracking/__init__.py
"""
Домен трекинга.
Текущие локации, история и подписки на обновления по задачам доставки.
"""

from src.core.tracking.exceptions import (
    InvalidLocationError,
    TrackingError,
    TrackingInternalError,
)
from src.core.tracking.models import (
    ActiveDelivery,
    Coordinates,
    LocationPoint,
    TrackingStats,
)
from src.core.tracking.service import LocationTrackingService, format_timestamp

__all__ = [
    "ActiveDelivery",
    "Coordinates",
    "InvalidLocationError",
    "LocationPoint",
    "LocationTrackingService",
    "TrackingError",
    "TrackingInternalError",
    "TrackingStats",
    "format_timestamp",
]
