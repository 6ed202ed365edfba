# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины — config/config.json.
Адрес сервера, CORS и окружение переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.common.constants import (
    CLEANUP_INTERVAL_SECONDS,
    DEFAULT_DELIVERY_PERSON_ID,
    EXPIRY_THRESHOLD_MS,
    MAX_HISTORY_SIZE,
    STALE_THRESHOLD_MS,
    SUBSCRIBE_TIMEOUT_SECONDS,
    SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS,
)


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json(path: Path | None = None) -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = path or get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "maps_backend"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"


class ServerSettings(BaseModel):
    """Настройки HTTP сервера."""
    HOST: str = "0.0.0.0"
    PORT: int = Field(default=5002, ge=1, le=65535)
    FRONTEND_URL: str = "http://localhost:3000"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_format(cls, v: str) -> str:
        """Допускаются только colored и json."""
        if v not in ("colored", "json"):
            raise ValueError(f"Неизвестный формат логов: {v}")
        return v


class TrackingSettings(BaseModel):
    """Настройки трекинга локаций."""
    MAX_HISTORY_SIZE: int = Field(default=MAX_HISTORY_SIZE, ge=1)
    STALE_THRESHOLD_SECONDS: int = Field(default=STALE_THRESHOLD_MS // 1000, ge=1)
    EXPIRY_THRESHOLD_SECONDS: int = Field(default=EXPIRY_THRESHOLD_MS // 1000, ge=1)
    CLEANUP_INTERVAL_SECONDS: float = Field(default=CLEANUP_INTERVAL_SECONDS, gt=0)
    SUBSCRIBE_TIMEOUT_SECONDS: float = Field(default=SUBSCRIBE_TIMEOUT_SECONDS, gt=0)
    SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS: float = Field(
        default=SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS, gt=0
    )
    DEFAULT_DELIVERY_PERSON_ID: str = DEFAULT_DELIVERY_PERSON_ID

    @property
    def stale_threshold_ms(self) -> int:
        return self.STALE_THRESHOLD_SECONDS * 1000

    @property
    def expiry_threshold_ms(self) -> int:
        return self.EXPIRY_THRESHOLD_SECONDS * 1000


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_dict(cls, config_data: dict[str, Any]) -> "Settings":
        """
        Создаёт объект Settings из плоского словаря config.json.
        Переменные окружения имеют приоритет над файлом.
        """
        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        environment = os.getenv(
            "ENVIRONMENT",
            os.getenv("NODE_ENV", data.get("ENVIRONMENT", "development")),
        )
        log_level = os.getenv("LOG_LEVEL", data.get("LOG_LEVEL", "INFO"))

        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "maps_backend"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", False),
                LOG_LEVEL=log_level,
                ENVIRONMENT=environment,
            ),
            server=ServerSettings(
                HOST=os.getenv("HOST", data.get("HOST", "0.0.0.0")),
                PORT=int(os.getenv("PORT", data.get("PORT", 5002))),
                FRONTEND_URL=os.getenv(
                    "FRONTEND_URL", data.get("FRONTEND_URL", "http://localhost:3000")
                ),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=log_level,
                LOG_TO_FILE=data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=data.get("LOG_FORMAT", "colored"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            tracking=TrackingSettings(
                MAX_HISTORY_SIZE=data.get("MAX_HISTORY_SIZE", MAX_HISTORY_SIZE),
                STALE_THRESHOLD_SECONDS=data.get(
                    "STALE_THRESHOLD_SECONDS", STALE_THRESHOLD_MS // 1000
                ),
                EXPIRY_THRESHOLD_SECONDS=data.get(
                    "EXPIRY_THRESHOLD_SECONDS", EXPIRY_THRESHOLD_MS // 1000
                ),
                CLEANUP_INTERVAL_SECONDS=data.get(
                    "CLEANUP_INTERVAL_SECONDS", CLEANUP_INTERVAL_SECONDS
                ),
                SUBSCRIBE_TIMEOUT_SECONDS=data.get(
                    "SUBSCRIBE_TIMEOUT_SECONDS", SUBSCRIBE_TIMEOUT_SECONDS
                ),
                SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS=data.get(
                    "SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS", SUBSCRIBER_CALLBACK_TIMEOUT_SECONDS
                ),
                DEFAULT_DELIVERY_PERSON_ID=data.get(
                    "DEFAULT_DELIVERY_PERSON_ID", DEFAULT_DELIVERY_PERSON_ID
                ),
            ),
        )

    @classmethod
    def from_config_json(cls, path: Path | None = None) -> "Settings":
        """Создаёт объект Settings из config.json."""
        return cls.from_dict(load_config_json(path))


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv

    # Загружаем .env файл
    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
