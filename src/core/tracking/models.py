# src/core/tracking/models.py
"""
Модели данных трекинга.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.common.constants import (
    DEFAULT_DELIVERY_PERSON_ID,
    EXPIRY_THRESHOLD_MS,
    STALE_THRESHOLD_MS,
    StalenessStatus,
)


class Coordinates(BaseModel):
    """Географическая точка."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    lat: float = Field(..., description="Широта")
    lng: float = Field(..., description="Долгота")


class LocationPoint(BaseModel):
    """Одно наблюдение местоположения курьера по задаче."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    task_id: str = Field(..., description="ID задачи доставки")
    delivery_person_id: str = Field(DEFAULT_DELIVERY_PERSON_ID, description="ID курьера")
    location: Coordinates
    accuracy: Optional[float] = Field(None, description="Точность в метрах")

    # Временные метки (из одного чтения часов)
    timestamp: str = Field(..., description="ISO-8601, UTC")
    updated_at: int = Field(..., description="Unix-время в мс")

    def age_ms(self, now_ms: int) -> int:
        """Возраст точки в миллисекундах."""
        return now_ms - self.updated_at

    def age_seconds(self, now_ms: int) -> int:
        """Возраст точки в целых секундах."""
        return self.age_ms(now_ms) // 1000

    def is_stale(self, now_ms: int, threshold_ms: int = STALE_THRESHOLD_MS) -> bool:
        """Точка старше порога (строго)."""
        return self.age_ms(now_ms) > threshold_ms

    def staleness(
        self,
        now_ms: int,
        stale_ms: int = STALE_THRESHOLD_MS,
        expiry_ms: int = EXPIRY_THRESHOLD_MS,
    ) -> StalenessStatus:
        """Классификация свежести точки."""
        if self.is_stale(now_ms, expiry_ms):
            return StalenessStatus.EXPIRED
        if self.is_stale(now_ms, stale_ms):
            return StalenessStatus.STALE
        return StalenessStatus.FRESH


class ActiveDelivery(BaseModel):
    """Задача с текущей локацией (для списка активных доставок)."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    delivery_person_id: str
    location: Coordinates
    timestamp: str
    age_seconds: int


class TrackingStats(BaseModel):
    """Агрегированная статистика хранилища."""

    active_deliveries: int = 0
    total_history_entries: int = 0
    subscriber_tasks: int = 0
