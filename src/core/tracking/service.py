# src/core/tracking/service.py
"""
Сервис трекинга локаций доставок.

Хранит в памяти текущую локацию, ограниченную историю и подписчиков
по каждой задаче. Все изменения трёх словарей выполняются без await внутри,
поэтому в рамках одного event loop они атомарны относительно друг друга.
"""

from __future__ import annotations

import asyncio
import inspect
import math
import time
from collections import deque
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from numbers import Real
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Union

from src.common.constants import (
    DEFAULT_DELIVERY_PERSON_ID,
    EXPIRY_THRESHOLD_MS,
    MAX_HISTORY_SIZE,
    SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS,
    TypeMsg,
)
from src.common.logger import log_debug, log_error, log_info, log_warning
from src.core.geo import calculate_distance
from src.core.tracking.exceptions import InvalidLocationError, TrackingInternalError
from src.core.tracking.models import (
    ActiveDelivery,
    Coordinates,
    LocationPoint,
    TrackingStats,
)

if TYPE_CHECKING:
    from src.config.loader import TrackingSettings


LocationCallback = Callable[[LocationPoint], Union[None, Awaitable[None]]]
Clock = Callable[[], int]


def current_time_ms() -> int:
    """Текущее Unix-время в миллисекундах."""
    return time.time_ns() // 1_000_000


def format_timestamp(instant_ms: int) -> str:
    """Unix-время в мс -> ISO-8601 в UTC с миллисекундами и суффиксом Z."""
    dt = datetime.fromtimestamp(instant_ms // 1000, tz=timezone.utc)
    dt += timedelta(milliseconds=instant_ms % 1000)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LocationTrackingService:
    """
    Хранилище локаций доставок.

    Ответственности:
    - Текущая локация и история (последние N точек) по задаче
    - Синхронное оповещение подписчиков при каждом обновлении
    - Список активных доставок и статистика
    - Очистка устаревших локаций
    """

    def __init__(
        self,
        max_history_size: int = MAX_HISTORY_SIZE,
        clock: Optional[Clock] = None,
        default_delivery_person_id: str = DEFAULT_DELIVERY_PERSON_ID,
        subscriber_timeout: float = SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS,
        expiry_threshold_ms: int = EXPIRY_THRESHOLD_MS,
    ) -> None:
        """
        Args:
            max_history_size: Максимум точек истории на задачу
            clock: Источник времени в мс (для тестов)
            default_delivery_person_id: ID курьера, если не передан
            subscriber_timeout: Лимит ожидания асинхронного подписчика, сек
            expiry_threshold_ms: Возраст, после которого локация удаляется
        """
        if max_history_size < 1:
            raise ValueError("max_history_size должен быть >= 1")

        self._max_history_size = max_history_size
        self._clock: Clock = clock or current_time_ms
        self._default_delivery_person_id = default_delivery_person_id
        self._subscriber_timeout = subscriber_timeout
        self._expiry_threshold_ms = expiry_threshold_ms

        # task_id -> текущая точка
        self._current: dict[str, LocationPoint] = {}
        # task_id -> история, старые точки слева
        self._history: dict[str, deque[LocationPoint]] = {}
        # task_id -> набор колбэков
        self._subscribers: dict[str, set[LocationCallback]] = {}

    @classmethod
    def from_settings(
        cls,
        tracking: "TrackingSettings",
        clock: Optional[Clock] = None,
    ) -> "LocationTrackingService":
        """Создаёт сервис по секции tracking конфигурации."""
        return cls(
            max_history_size=tracking.MAX_HISTORY_SIZE,
            clock=clock,
            default_delivery_person_id=tracking.DEFAULT_DELIVERY_PERSON_ID,
            subscriber_timeout=tracking.SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS,
            expiry_threshold_ms=tracking.expiry_threshold_ms,
        )

    @property
    def max_history_size(self) -> int:
        return self._max_history_size

    def now(self) -> int:
        """Текущее время по часам сервиса, мс."""
        return self._clock()

    # =========================================================================
    # ОБНОВЛЕНИЕ
    # =========================================================================

    async def update_location(
        self,
        task_id: str,
        location: Union[Coordinates, Mapping[str, Any]],
        *,
        delivery_person_id: Optional[str] = None,
        accuracy: Optional[float] = None,
    ) -> LocationPoint:
        """
        Обновить локацию задачи.

        1. Проставление временных меток
        2. Запись текущей локации
        3. Добавление в историю (с вытеснением самой старой точки)
        4. Оповещение подписчиков

        Диапазоны координат проверяет HTTP-слой; здесь только структура.

        Returns:
            Сохранённая точка с метками времени

        Raises:
            InvalidLocationError: пустой task_id или нечисловые координаты
            TrackingInternalError: сбой при записи состояния
        """
        if not isinstance(task_id, str) or not task_id:
            raise InvalidLocationError("task_id не может быть пустым")

        coords = self._coerce_coordinates(location)
        instant = self._clock()

        point = LocationPoint(
            task_id=task_id,
            delivery_person_id=delivery_person_id or self._default_delivery_person_id,
            location=coords,
            accuracy=accuracy if accuracy else None,
            timestamp=format_timestamp(instant),
            updated_at=instant,
        )

        self._commit(task_id, point)

        await log_debug(
            f"Локация обновлена: lat={coords.lat:.6f}, lng={coords.lng:.6f}, "
            f"accuracy={f'{accuracy}m' if accuracy else 'N/A'}",
            extra={"task_id": task_id},
        )

        await self._notify_subscribers(task_id, point)

        return point

    def _commit(self, task_id: str, point: LocationPoint) -> None:
        """Записывает точку как текущую и в историю; при сбое откатывает."""
        previous = self._current.get(task_id)
        history = self._history.get(task_id)
        created_history = history is None

        try:
            if history is None:
                history = deque(maxlen=self._max_history_size)
                self._history[task_id] = history
            self._current[task_id] = point
            # deque с maxlen сам вытесняет самую старую точку
            history.append(point)
        except Exception as e:
            if previous is None:
                self._current.pop(task_id, None)
            else:
                self._current[task_id] = previous
            if created_history:
                self._history.pop(task_id, None)
            raise TrackingInternalError(
                f"Не удалось сохранить локацию для задачи {task_id}"
            ) from e

    @staticmethod
    def _coerce_coordinates(location: Union[Coordinates, Mapping[str, Any]]) -> Coordinates:
        if isinstance(location, Coordinates):
            return location
        if not isinstance(location, Mapping):
            raise InvalidLocationError("Ожидается объект { lat: number, lng: number }")

        lat = location.get("lat")
        lng = location.get("lng")
        for value in (lat, lng):
            if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
                raise InvalidLocationError("Ожидается объект { lat: number, lng: number }")

        return Coordinates(lat=float(lat), lng=float(lng))

    # =========================================================================
    # ПОДПИСЧИКИ
    # =========================================================================

    def subscribe(self, task_id: str, callback: LocationCallback) -> Callable[[], None]:
        """
        Подписаться на обновления локации задачи.

        Колбэк может быть обычной функцией или корутинной функцией.

        Returns:
            Функция отписки. Повторный вызов ничего не делает.
        """
        callbacks = self._subscribers.setdefault(task_id, set())
        callbacks.add(callback)

        def unsubscribe() -> None:
            # Набор мог быть удалён очисткой и создан заново другим подписчиком
            if self._subscribers.get(task_id) is not callbacks:
                return
            callbacks.discard(callback)
            if not callbacks:
                del self._subscribers[task_id]

        return unsubscribe

    def subscriber_count(self, task_id: str) -> int:
        """Количество подписчиков задачи."""
        return len(self._subscribers.get(task_id, ()))

    async def _notify_subscribers(self, task_id: str, point: LocationPoint) -> None:
        """
        Оповестить подписчиков задачи.

        Ошибка или таймаут одного подписчика логируется и не влияет
        на остальных и на само обновление.
        """
        callbacks = list(self._subscribers.get(task_id, ()))

        for callback in callbacks:
            try:
                result = callback(point)
                if inspect.isawaitable(result):
                    await asyncio.wait_for(result, timeout=self._subscriber_timeout)
            except asyncio.TimeoutError:
                await log_warning(
                    f"Подписчик не уложился в {self._subscriber_timeout} с",
                    extra={"task_id": task_id},
                )
            except Exception as e:
                await log_error(
                    f"Ошибка в обработчике подписки: {e}",
                    extra={"task_id": task_id},
                    exc_info=True,
                )

    # =========================================================================
    # ЧТЕНИЕ
    # =========================================================================

    def get_current_location(self, task_id: str) -> Optional[LocationPoint]:
        """Текущая локация задачи или None."""
        return self._current.get(task_id)

    def get_location_history(self, task_id: str) -> list[LocationPoint]:
        """История локаций (старые первыми); пустой список, если истории нет."""
        return list(self._history.get(task_id, ()))

    def get_active_deliveries(self, now_ms: Optional[int] = None) -> list[ActiveDelivery]:
        """
        Снимок всех задач с текущей локацией.

        Порядок не гарантируется.
        """
        now = self._clock() if now_ms is None else now_ms
        return [
            ActiveDelivery(
                task_id=task_id,
                delivery_person_id=point.delivery_person_id,
                location=point.location,
                timestamp=point.timestamp,
                age_seconds=point.age_seconds(now),
            )
            for task_id, point in self._current.items()
        ]

    def get_stats(self) -> TrackingStats:
        """Получить статистику."""
        return TrackingStats(
            active_deliveries=len(self._current),
            total_history_entries=sum(len(h) for h in self._history.values()),
            subscriber_tasks=len(self._subscribers),
        )

    # =========================================================================
    # УДАЛЕНИЕ
    # =========================================================================

    def _remove(self, task_id: str) -> bool:
        existed = (
            task_id in self._current
            or task_id in self._history
            or task_id in self._subscribers
        )
        self._current.pop(task_id, None)
        self._history.pop(task_id, None)
        self._subscribers.pop(task_id, None)
        return existed

    async def clear_location(self, task_id: str) -> bool:
        """
        Удалить текущую локацию, историю и подписчиков задачи.

        Returns:
            Были ли какие-либо данные до вызова
        """
        existed = self._remove(task_id)
        if existed:
            await log_info("Данные локации очищены", extra={"task_id": task_id})
        return existed

    async def cleanup_stale_locations(
        self,
        now_ms: Optional[int] = None,
        threshold_ms: Optional[int] = None,
    ) -> list[str]:
        """
        Удалить задачи, чья текущая локация старше порога (по умолчанию 1 час).

        Returns:
            Список удалённых task_id
        """
        now = self._clock() if now_ms is None else now_ms
        threshold = self._expiry_threshold_ms if threshold_ms is None else threshold_ms

        stale = [
            task_id
            for task_id, point in self._current.items()
            if now - point.updated_at > threshold
        ]
        for task_id in stale:
            self._remove(task_id)

        for task_id in stale:
            await log_info(
                "Удалена устаревшая локация",
                type_msg=TypeMsg.INFO,
                extra={"task_id": task_id},
            )

        return stale

    # =========================================================================
    # ГЕОМЕТРИЯ
    # =========================================================================

    @staticmethod
    def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        """Расстояние по большому кругу, км."""
        return calculate_distance(lat1, lng1, lat2, lng2)

    def distance_to(self, task_id: str, lat: float, lng: float) -> Optional[float]:
        """Расстояние от текущей локации задачи до точки, км; None если локации нет."""
        point = self._current.get(task_id)
        if point is None:
            return None
        return calculate_distance(point.location.lat, point.location.lng, lat, lng)
