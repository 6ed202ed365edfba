# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from src.config.loader import Settings, TrackingSettings
from src.core.tracking import LocationTrackingService
from src.services.location_tracking.app import create_app


# 2023-11-14T22:13:20.000Z
START_MS = 1_700_000_000_000


class FakeClock:
    """Управляемые часы в миллисекундах."""

    def __init__(self, start_ms: int = START_MS) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture
def app_settings() -> Settings:
    """Настройки приложения с коротким таймаутом long polling."""
    return Settings(tracking=TrackingSettings(SUBSCRIBE_TIMEOUT_SECONDS=0.05))


# =============================================================================
# ФИКСТУРЫ ТРЕКИНГА
# =============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """Фиктивные часы."""
    return FakeClock()


@pytest.fixture
def service(clock: FakeClock) -> LocationTrackingService:
    """Свой экземпляр сервиса на каждый тест."""
    return LocationTrackingService(clock=clock)


@pytest.fixture
def client(
    service: LocationTrackingService,
    app_settings: Settings,
) -> Generator[TestClient, None, None]:
    """HTTP клиент к приложению с сервисом из фикстуры."""
    app = create_app(app_settings=app_settings, service=service, run_cleanup_worker=False)
    with TestClient(app) as test_client:
        yield test_client
