# src/services/location_tracking/app.py
"""
FastAPI приложение Location Tracking.

Endpoints:
- POST /api/delivery/{task_id}/location - обновить локацию курьера
- GET /api/delivery/{task_id}/location - текущая локация + свежесть
- DELETE /api/delivery/{task_id}/location - очистить данные задачи
- GET /api/delivery/active - активные доставки
- GET /api/location/{task_id} - история локаций
- GET /api/location/{task_id}/current - текущая локация
- GET /api/location/{task_id}/distance - расстояние до точки
- POST /api/location/{task_id}/subscribe - long polling
- GET /health, GET /stats, GET /
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.common.constants import TypeMsg
from src.common.logger import log_debug, log_error, log_info, setup_logging
from src.config import settings
from src.config.loader import Settings
from src.core.tracking import (
    InvalidLocationError,
    LocationTrackingService,
    TrackingInternalError,
    TrackingStats,
)
from src.services.location_tracking.dependencies import (
    cleanup_dependencies,
    get_tracking_service,
    init_dependencies,
)
from src.services.location_tracking.routes import delivery_router, location_router
from src.shared.models.common import ErrorResponse, HealthStatus
from src.worker.cleanup import StaleLocationCleanupWorker


SERVICE_NAME = "maps_backend"

_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "invalid_input",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def _error(status_code: int, error: str, message: str, details: Any = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def create_app(
    app_settings: Optional[Settings] = None,
    service: Optional[LocationTrackingService] = None,
    run_cleanup_worker: bool = True,
) -> FastAPI:
    """
    Собрать приложение.

    Args:
        app_settings: Настройки (по умолчанию — из config.json)
        service: Готовый сервис трекинга (тесты передают свой, с фиктивными часами)
        run_cleanup_worker: Запускать ли периодическую очистку
    """
    cfg = app_settings or settings

    # === LIFESPAN ===

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Жизненный цикл приложения."""
        setup_logging()
        app.state.started_at = time.monotonic()

        tracking_service = service or LocationTrackingService.from_settings(cfg.tracking)
        worker = None
        if run_cleanup_worker:
            worker = StaleLocationCleanupWorker(
                tracking_service,
                interval_seconds=cfg.tracking.CLEANUP_INTERVAL_SECONDS,
                threshold_ms=cfg.tracking.expiry_threshold_ms,
            )

        init_dependencies(app, tracking_service, cfg.tracking, worker)
        if worker is not None:
            await worker.start()

        await log_info(
            f"Maps Backend запущен: порт {cfg.server.PORT}, "
            f"окружение {cfg.system.ENVIRONMENT}, frontend {cfg.server.FRONTEND_URL}",
            type_msg=TypeMsg.INFO,
        )

        yield

        if worker is not None:
            await worker.stop()
        cleanup_dependencies(app)
        await log_info("Maps Backend остановлен", type_msg=TypeMsg.INFO)

    # === APP ===

    app = FastAPI(
        title="Maps Backend",
        description="Трекинг местоположения курьеров по задачам доставки.",
        version=cfg.system.VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[cfg.server.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Логирование входящих запросов."""
        await log_debug(f"{request.method} {request.url.path}")
        return await call_next(request)

    # === ERROR HANDLERS ===

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "invalid_input",
            "Invalid request data. Location requires { lat: number in [-90, 90], lng: number in [-180, 180] }",
            jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(InvalidLocationError)
    async def invalid_location_handler(request: Request, exc: InvalidLocationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, "invalid_input", str(exc))

    @app.exception_handler(TrackingInternalError)
    async def internal_error_handler(request: Request, exc: TrackingInternalError) -> JSONResponse:
        await log_error(
            f"Сбой трекинга: {exc}",
            extra={"path": request.url.path},
            exc_info=exc,
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_failure", str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        details = {"path": request.url.path} if exc.status_code == status.HTTP_404_NOT_FOUND else None
        return _error(
            exc.status_code,
            _ERROR_CODES.get(exc.status_code, "http_error"),
            str(exc.detail),
            details,
        )

    # === SERVICE ENDPOINTS ===

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check(request: Request) -> HealthStatus:
        """Проверка здоровья сервиса."""
        started_at = getattr(request.app.state, "started_at", None)
        return HealthStatus(
            status="healthy",
            service=SERVICE_NAME,
            version=cfg.system.VERSION,
            timestamp=_utc_now_iso(),
            uptime_seconds=None if started_at is None else round(time.monotonic() - started_at, 3),
        )

    @app.get("/", tags=["Health"])
    async def root() -> dict[str, Any]:
        """Описание API."""
        return {
            "message": "Maps Backend API",
            "version": cfg.system.VERSION,
            "endpoints": {
                "health": "/health",
                "stats": "/stats",
                "delivery": "/api/delivery/{task_id}/location",
                "active": "/api/delivery/active",
                "location": "/api/location/{task_id}",
                "subscribe": "/api/location/{task_id}/subscribe",
            },
        }

    @app.get("/stats", response_model=TrackingStats, tags=["Stats"])
    async def get_stats(request: Request) -> TrackingStats:
        """Статистика хранилища."""
        return get_tracking_service(request).get_stats()

    app.include_router(delivery_router, prefix="/api")
    app.include_router(location_router, prefix="/api")

    return app


app = create_app()
