# src/services/location_tracking/routes.py
"""
Роуты трекинга.

- /api/delivery/*: приём координат курьером, текущая локация, очистка
- /api/location/*: история, текущая локация, расстояние, long polling
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.config.loader import TrackingSettings
from src.core.tracking import ActiveDelivery, LocationPoint, LocationTrackingService
from src.core.tracking.models import Coordinates
from src.services.location_tracking.dependencies import (
    get_tracking_service,
    get_tracking_settings,
)
from src.services.location_tracking.long_poll import wait_for_location_update
from src.shared.models.common import ApiResponse, ErrorResponse
from src.shared.models.location_dto import (
    DistanceDTO,
    LocationMetaDTO,
    LocationUpdateRequest,
    SubscribeRequest,
)

ServiceDep = Annotated[LocationTrackingService, Depends(get_tracking_service)]
SettingsDep = Annotated[TrackingSettings, Depends(get_tracking_settings)]

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Нет данных по задаче"}}

delivery_router = APIRouter(prefix="/delivery", tags=["Delivery"])
location_router = APIRouter(prefix="/location", tags=["Location"])


def _not_found(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


# =============================================================================
# /api/delivery
# =============================================================================

@delivery_router.get(
    "/active",
    response_model=ApiResponse[list[ActiveDelivery]],
    summary="Активные доставки",
)
async def get_active_deliveries(service: ServiceDep) -> ApiResponse[list[ActiveDelivery]]:
    """Все задачи с текущей локацией и возрастом последнего обновления."""
    active = service.get_active_deliveries()
    return ApiResponse(data=active, count=len(active))


@delivery_router.post(
    "/{task_id}/location",
    response_model=ApiResponse[LocationPoint],
    responses={400: {"model": ErrorResponse}},
    summary="Обновить локацию курьера",
)
async def update_location(
    task_id: str,
    update: LocationUpdateRequest,
    service: ServiceDep,
) -> ApiResponse[LocationPoint]:
    """
    Обновить локацию курьера.

    Координаты проверяются здесь: lat в [-90, 90], lng в [-180, 180].
    """
    point = await service.update_location(
        task_id,
        update.location.to_domain(),
        delivery_person_id=update.delivery_person_id,
        accuracy=update.accuracy,
    )
    return ApiResponse(data=point, message="Location updated successfully")


@delivery_router.get(
    "/{task_id}/location",
    response_model=ApiResponse[LocationPoint],
    responses=NOT_FOUND,
    summary="Текущая локация курьера",
)
async def get_delivery_location(
    task_id: str,
    service: ServiceDep,
    tracking: SettingsDep,
) -> ApiResponse[LocationPoint]:
    """Текущая локация с возрастом и признаком устаревания (старше 5 минут)."""
    point = service.get_current_location(task_id)
    if point is None:
        raise _not_found(f"Task {task_id} has no active tracking")

    now = service.now()
    meta = LocationMetaDTO(
        age_seconds=point.age_seconds(now),
        is_stale=point.is_stale(now, tracking.stale_threshold_ms),
        staleness=point.staleness(
            now, tracking.stale_threshold_ms, tracking.expiry_threshold_ms
        ).value,
    )
    return ApiResponse(data=point, meta=meta.model_dump())


@delivery_router.delete(
    "/{task_id}/location",
    response_model=ApiResponse[dict[str, bool]],
    summary="Очистить локацию (доставка завершена)",
)
async def clear_location(task_id: str, service: ServiceDep) -> ApiResponse[dict[str, bool]]:
    """Удалить текущую локацию, историю и подписки задачи."""
    existed = await service.clear_location(task_id)
    return ApiResponse(
        data={"deleted": existed},
        message="Location data cleared" if existed else "No data to clear",
    )


# =============================================================================
# /api/location
# =============================================================================

@location_router.get(
    "/{task_id}",
    response_model=ApiResponse[list[LocationPoint]],
    responses=NOT_FOUND,
    summary="История локаций",
)
async def get_location_history(
    task_id: str,
    service: ServiceDep,
) -> ApiResponse[list[LocationPoint]]:
    """История локаций задачи, старые точки первыми."""
    history = service.get_location_history(task_id)
    if not history:
        raise _not_found(f"Task {task_id} has no location history")
    return ApiResponse(data=history, count=len(history))


@location_router.get(
    "/{task_id}/current",
    response_model=ApiResponse[LocationPoint],
    responses=NOT_FOUND,
    summary="Текущая локация",
)
async def get_current_location(task_id: str, service: ServiceDep) -> ApiResponse[LocationPoint]:
    """Текущая локация задачи."""
    point = service.get_current_location(task_id)
    if point is None:
        raise _not_found(f"Task {task_id} has no active tracking")
    return ApiResponse(data=point)


@location_router.get(
    "/{task_id}/distance",
    response_model=ApiResponse[DistanceDTO],
    responses=NOT_FOUND,
    summary="Расстояние до точки",
)
async def get_distance(
    task_id: str,
    service: ServiceDep,
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
) -> ApiResponse[DistanceDTO]:
    """Расстояние по прямой (Haversine) от текущей локации курьера до точки, км."""
    point = service.get_current_location(task_id)
    if point is None:
        raise _not_found(f"Task {task_id} has no active tracking")

    distance = service.distance_to(task_id, lat, lng)
    return ApiResponse(
        data=DistanceDTO(
            task_id=task_id,
            distance_km=round(distance, 3),
            from_location=point.location,
            to_location=Coordinates(lat=lat, lng=lng),
        )
    )


@location_router.post(
    "/{task_id}/subscribe",
    response_model=ApiResponse[LocationPoint],
    summary="Long polling обновлений",
)
async def subscribe_to_updates(
    task_id: str,
    service: ServiceDep,
    tracking: SettingsDep,
    body: Optional[SubscribeRequest] = None,
) -> ApiResponse[LocationPoint]:
    """
    Ждать новую локацию (альтернатива WebSocket).

    Отвечает сразу, если текущая точка отличается от last_timestamp,
    иначе ждёт обновления до SUBSCRIBE_TIMEOUT_SECONDS.
    """
    last_timestamp = body.last_timestamp if body else None
    point = await wait_for_location_update(
        service,
        task_id,
        last_timestamp,
        timeout=tracking.SUBSCRIBE_TIMEOUT_SECONDS,
    )
    if point is None:
        return ApiResponse(data=None, message="No new updates")
    return ApiResponse(data=point, message="New location available")
