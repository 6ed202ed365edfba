# src/shared/models/common.py
"""
Общие модели HTTP-ответов.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Стандартный конверт успешного ответа."""

    success: bool = True
    data: T | None = None
    message: str | None = None
    count: int | None = None
    meta: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой."""

    success: bool = False
    error: str
    message: str
    details: Any | None = None


class HealthStatus(BaseModel):
    """Статус здоровья сервиса."""

    service: str
    status: str = "healthy"  # healthy, degraded, unhealthy
    version: str | None = None
    timestamp: str | None = None
    uptime_seconds: float | None = None
