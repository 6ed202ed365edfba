#!/usr/bin/env python3
# main.py
"""
Точка входа Maps Backend.
Запускает HTTP-сервис трекинга под uvicorn.

Использование:
    python main.py              # хост и порт из config.json / окружения
    python main.py --help
"""

from __future__ import annotations

import sys

import uvicorn

from src.config import settings
from src.common.logger import setup_logging


def print_usage() -> None:
    """Печатает справку."""
    print(f"""
Maps Backend {settings.system.VERSION}

Использование:
    python main.py

Переменные окружения:
    PORT            порт HTTP (по умолчанию {settings.server.PORT})
    HOST            адрес (по умолчанию {settings.server.HOST})
    FRONTEND_URL    разрешённый CORS origin
    NODE_ENV        окружение (development/production)
    LOG_LEVEL       уровень логирования
    """)


def main() -> None:
    """Запустить сервис трекинга."""
    setup_logging()

    uvicorn.run(
        "src.services.location_tracking.app:app",
        host=settings.server.HOST,
        port=settings.server.PORT,
        reload=settings.system.DEBUG,
        log_level=settings.system.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1].lower() in ("--help", "-h"):
        print_usage()
        sys.exit(0)
    main()
