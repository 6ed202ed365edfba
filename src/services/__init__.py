# src/services/__init__.py
"""
HTTP-сервисы приложения.

Сервисы:
- location_tracking: приём координат курьеров, чтение текущей локации
  и истории, long polling обновлений
"""

__all__: list[str] = []
