#!/usr/bin/env python3
"""
Entrypoint для Location Tracking.

Запуск:
    python entrypoints/entrypoint_location_tracking.py

Порт по умолчанию: 5002 (PORT в окружении)
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings


def main() -> None:
    """Запустить Location Tracking без перезагрузки (production)."""
    uvicorn.run(
        "src.services.location_tracking.app:app",
        host=settings.server.HOST,
        port=settings.server.PORT,
        log_level=settings.system.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
