# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class StalenessStatus(str, Enum):
    """Свежесть локации (вычисляется при чтении, не хранится)."""
    FRESH = "fresh"
    STALE = "stale"      # старше 5 минут
    EXPIRED = "expired"  # старше 1 часа, удаляется при очистке


# =============================================================================
# ТРЕКИНГ
# =============================================================================

# Максимальное число точек истории на задачу
MAX_HISTORY_SIZE: int = 100

# Идентификатор курьера, если он не передан
DEFAULT_DELIVERY_PERSON_ID: str = "unknown"

# Пороги свежести (мс)
STALE_THRESHOLD_MS: int = 5 * 60 * 1000
EXPIRY_THRESHOLD_MS: int = 60 * 60 * 1000

# Интервал очистки устаревших локаций (сек)
CLEANUP_INTERVAL_SECONDS: int = 15 * 60

# Long polling
SUBSCRIBE_TIMEOUT_SECONDS: float = 30.0
SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS: float = 5.0
LONG_POLL_CHECK_INTERVAL_SECONDS: float = 1.0

# Радиус Земли в км
EARTH_RADIUS_KM: float = 6371.0
