# src/shared/models/location_dto.py
"""
DTO запросов и ответов трекинга.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.core.tracking.models import Coordinates


class CoordinatesDTO(BaseModel):
    """Координаты во входящем запросе: только JSON-числа в допустимых диапазонах."""

    model_config = ConfigDict(from_attributes=True)

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False, strict=True)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False, strict=True)

    def to_domain(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)


class LocationUpdateRequest(BaseModel):
    """Обновление геолокации курьера."""

    location: CoordinatesDTO
    # deliveryPersonId: имя поля у старых клиентов
    delivery_person_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("delivery_person_id", "deliveryPersonId"),
    )
    accuracy: Optional[float] = Field(default=None, ge=0)  # метры


class SubscribeRequest(BaseModel):
    """Тело запроса long polling."""

    last_timestamp: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("last_timestamp", "lastTimestamp"),
    )


class LocationMetaDTO(BaseModel):
    """Метаданные свежести текущей локации."""

    age_seconds: int
    is_stale: bool
    staleness: str


class DistanceDTO(BaseModel):
    """Расстояние от текущей локации до точки."""

    task_id: str
    distance_km: float
    from_location: Coordinates
    to_location: Coordinates
