# src/core/tracking/exceptions.py
"""
Исключения домена трекинга.

"Не найдено" исключением не является: сервис возвращает None / [] / False,
а решение об ответе 404 принимает HTTP-слой.
"""


class TrackingError(Exception):
    """Базовая ошибка трекинга."""


class InvalidLocationError(TrackingError):
    """Структурно некорректное обновление (пустой task_id, нечисловые координаты)."""


class TrackingInternalError(TrackingError):
    """Непредвиденный сбой при изменении состояния трекинга."""
