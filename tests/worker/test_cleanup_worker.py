# tests/worker/test_cleanup_worker.py
"""
Тесты для воркеров (src/worker/base.py, src/worker/cleanup.py).
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from src.worker import PeriodicWorker, StaleLocationCleanupWorker


SF = {"lat": 37.7749, "lng": -122.4194}


class CountingWorker(PeriodicWorker):
    """Воркер, падающий на первой итерации."""

    def __init__(self, interval_seconds: float) -> None:
        super().__init__(interval_seconds)
        self.calls = 0

    @property
    def name(self) -> str:
        return "Counting"

    async def run_once(self) -> None:
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("first run fails")


class TestPeriodicWorker:
    """Тесты базового воркера."""

    @pytest.mark.parametrize("interval", [0, -1])
    def test_rejects_non_positive_interval(self, interval: float) -> None:
        with pytest.raises(ValueError):
            CountingWorker(interval)

    @pytest.mark.asyncio
    async def test_start_and_stop(self) -> None:
        worker = CountingWorker(0.01)

        await worker.start()
        assert worker.is_running is True

        await worker.stop()
        assert worker.is_running is False
        assert worker._task is None

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_task(self) -> None:
        worker = CountingWorker(10)

        await worker.start()
        task = worker._task
        await worker.start()

        assert worker._task is task
        await worker.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self) -> None:
        worker = CountingWorker(10)
        await worker.stop()
        assert worker.is_running is False

    @pytest.mark.asyncio
    async def test_error_does_not_stop_loop(self) -> None:
        worker = CountingWorker(0.01)

        with patch("src.worker.base.log_error", new_callable=AsyncMock) as mock_log:
            await worker.start()
            await asyncio.sleep(0.1)
            await worker.stop()

        assert worker.calls >= 2
        mock_log.assert_awaited()


class TestStaleLocationCleanupWorker:
    """Тесты воркера очистки."""

    def test_name(self, service) -> None:
        assert StaleLocationCleanupWorker(service).name == "StaleLocationCleanup"

    @pytest.mark.asyncio
    async def test_run_once_removes_expired(self, service, clock) -> None:
        await service.update_location("task-1", SF)
        clock.advance(3_600_001)

        removed = await StaleLocationCleanupWorker(service).run_once()

        assert removed == ["task-1"]
        assert service.get_current_location("task-1") is None

    @pytest.mark.asyncio
    async def test_run_once_nothing_to_remove(self, service) -> None:
        await service.update_location("task-1", SF)

        assert await StaleLocationCleanupWorker(service).run_once() == []
        assert service.get_current_location("task-1") is not None

    @pytest.mark.asyncio
    async def test_custom_threshold(self, service, clock) -> None:
        await service.update_location("task-1", SF)
        clock.advance(61_000)

        worker = StaleLocationCleanupWorker(service, threshold_ms=60_000)

        assert await worker.run_once() == ["task-1"]

    @pytest.mark.asyncio
    async def test_periodic_run(self, service, clock) -> None:
        await service.update_location("task-1", SF)
        clock.advance(3_600_001)
        worker = StaleLocationCleanupWorker(service, interval_seconds=0.01)

        await worker.start()
        await asyncio.sleep(0.1)
        await worker.stop()

        assert service.get_current_location("task-1") is None
