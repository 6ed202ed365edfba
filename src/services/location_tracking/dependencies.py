# src/services/location_tracking/dependencies.py
"""
Dependency Injection для Location Tracking.

Сервис и воркер живут в app.state: их создаёт владелец приложения
(lifespan или тест), роуты получают их через Depends.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI, Request

if TYPE_CHECKING:
    from src.config.loader import TrackingSettings
    from src.core.tracking import LocationTrackingService
    from src.worker.cleanup import StaleLocationCleanupWorker


def init_dependencies(
    app: FastAPI,
    service: "LocationTrackingService",
    tracking_settings: "TrackingSettings",
    cleanup_worker: Optional["StaleLocationCleanupWorker"] = None,
) -> None:
    """Привязать зависимости к приложению."""
    app.state.tracking_service = service
    app.state.tracking_settings = tracking_settings
    app.state.cleanup_worker = cleanup_worker


def cleanup_dependencies(app: FastAPI) -> None:
    """Отвязать зависимости при остановке приложения."""
    app.state.tracking_service = None
    app.state.cleanup_worker = None


def get_tracking_service(request: Request) -> "LocationTrackingService":
    """Получить сервис трекинга."""
    service = getattr(request.app.state, "tracking_service", None)
    if service is None:
        raise RuntimeError("Сервис трекинга не инициализирован. Вызовите init_dependencies()")
    return service


def get_tracking_settings(request: Request) -> "TrackingSettings":
    """Получить настройки трекинга."""
    tracking_settings = getattr(request.app.state, "tracking_settings", None)
    if tracking_settings is None:
        raise RuntimeError("Настройки трекинга не инициализированы. Вызовите init_dependencies()")
    return tracking_settings
