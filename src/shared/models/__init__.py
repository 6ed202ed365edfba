# src/shared/models/__init__.py
"""
DTO и Pydantic-модели HTTP-слоя.
"""

from src.shared.models.common import (
    ApiResponse,
    ErrorResponse,
    HealthStatus,
)
from src.shared.models.location_dto import (
    CoordinatesDTO,
    DistanceDTO,
    LocationMetaDTO,
    LocationUpdateRequest,
    SubscribeRequest,
)

__all__ = [
    # Common
    "ApiResponse",
    "ErrorResponse",
    "HealthStatus",
    # Location
    "CoordinatesDTO",
    "DistanceDTO",
    "LocationMetaDTO",
    "LocationUpdateRequest",
    "SubscribeRequest",
]
