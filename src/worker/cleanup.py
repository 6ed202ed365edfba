# src/worker/cleanup.py
"""
Воркер очистки устаревших локаций.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from src.common.constants import CLEANUP_INTERVAL_SECONDS, TypeMsg
from src.common.logger import log_info
from src.worker.base import PeriodicWorker

if TYPE_CHECKING:
    from src.core.tracking import LocationTrackingService


class StaleLocationCleanupWorker(PeriodicWorker):
    """Раз в интервал удаляет задачи, не обновлявшиеся дольше порога."""

    def __init__(
        self,
        service: "LocationTrackingService",
        interval_seconds: float = CLEANUP_INTERVAL_SECONDS,
        threshold_ms: Optional[int] = None,
    ) -> None:
        """
        Args:
            service: Сервис трекинга
            interval_seconds: Интервал очистки (по умолчанию 15 минут)
            threshold_ms: Порог возраста; None — порог сервиса (1 час)
        """
        super().__init__(interval_seconds)
        self._service = service
        self._threshold_ms = threshold_ms

    @property
    def name(self) -> str:
        return "StaleLocationCleanup"

    async def run_once(self) -> list[str]:
        """Удаляет устаревшие локации и возвращает их task_id."""
        removed = await self._service.cleanup_stale_locations(threshold_ms=self._threshold_ms)
        if removed:
            await log_info(
                f"Очистка: удалено {len(removed)} устаревших задач",
                type_msg=TypeMsg.INFO,
                extra={"task_ids": removed},
            )
        return removed
