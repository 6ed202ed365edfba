# src/worker/base.py
"""
Базовый класс для периодических воркеров.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional

from src.common.logger import log_error, log_info
from src.common.constants import TypeMsg


class PeriodicWorker(ABC):
    """
    Базовый класс воркера, выполняющего задачу с фиксированным интервалом.

    Жизненный цикл управляется владельцем (start/stop), тесты могут
    вызывать run_once напрямую без таймеров.
    """

    def __init__(self, interval_seconds: float) -> None:
        """
        Args:
            interval_seconds: Пауза между итерациями
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds должен быть > 0")

        self.interval_seconds = interval_seconds
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Имя воркера."""
        pass

    @abstractmethod
    async def run_once(self) -> Any:
        """Одна итерация работы."""
        pass

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Запускает воркер."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._loop(), name=f"worker:{self.name}")
        await log_info(
            f"Воркер {self.name} запущен (интервал {self.interval_seconds} с)",
            type_msg=TypeMsg.INFO,
        )

    async def stop(self) -> None:
        """Останавливает воркер."""
        if not self._running:
            return

        self._running = False

        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

        await log_info(f"Воркер {self.name} остановлен", type_msg=TypeMsg.INFO)

    async def _loop(self) -> None:
        """Цикл: пауза, затем итерация. Ошибка итерации не останавливает цикл."""
        while self._running:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception as e:
                await log_error(
                    f"Ошибка в воркере {self.name}: {e}",
                    exc_info=True,
                )
