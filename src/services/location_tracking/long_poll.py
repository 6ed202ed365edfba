# src/services/location_tracking/long_poll.py
"""
Long polling поверх подписок сервиса трекинга.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from src.common.constants import LONG_POLL_CHECK_INTERVAL_SECONDS
from src.core.tracking import LocationPoint, LocationTrackingService


async def wait_for_location_update(
    service: LocationTrackingService,
    task_id: str,
    last_timestamp: Optional[str],
    timeout: float,
    check_interval: float = LONG_POLL_CHECK_INTERVAL_SECONDS,
) -> Optional[LocationPoint]:
    """
    Дождаться точки, чья метка времени отличается от last_timestamp.

    Если текущая локация уже новее, возвращается сразу. Иначе ждёт
    оповещения не дольше timeout секунд, раз в check_interval перечитывая
    текущую локацию. Подписка снимается в любом случае.

    Returns:
        Новая точка или None по таймауту
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    future: asyncio.Future[LocationPoint] = loop.create_future()

    def on_update(point: LocationPoint) -> None:
        if not future.done() and point.timestamp != last_timestamp:
            future.set_result(point)

    # Подписка до чтения текущей локации, чтобы не пропустить обновление между ними
    unsubscribe = service.subscribe(task_id, on_update)
    try:
        while True:
            current = service.get_current_location(task_id)
            if current is not None and current.timestamp != last_timestamp:
                return current

            remaining = deadline - loop.time()
            if remaining <= 0:
                return None

            try:
                return await asyncio.wait_for(
                    asyncio.shield(future), timeout=min(check_interval, remaining)
                )
            except asyncio.TimeoutError:
                # clear_location снимает подписчиков задачи вместе с данными
                unsubscribe()
                unsubscribe = service.subscribe(task_id, on_update)
    finally:
        unsubscribe()
