# src/services/location_tracking/__init__.py
"""
Location Tracking — HTTP-сервис трекинга доставок.

Обеспечивает:
- Приём координат курьеров
- Текущую локацию с признаком устаревания
- Историю последних точек
- Long polling обновлений
- Список активных доставок и статистику
"""
