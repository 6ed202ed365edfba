# tests/services/test_location_tracking_app.py
"""
Тесты HTTP API трекинга (src/services/location_tracking/app.py).
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.core.tracking import TrackingInternalError
from src.services.location_tracking.app import create_app


SF = {"lat": 37.7749, "lng": -122.4194}


def post_location(client: TestClient, task_id: str, **body):
    payload = {"location": SF, **body}
    return client.post(f"/api/delivery/{task_id}/location", json=payload)


class TestUpdateLocationEndpoint:
    """POST /api/delivery/{task_id}/location"""

    def test_success(self, client: TestClient) -> None:
        response = post_location(client, "task-1", accuracy=15)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Location updated successfully"
        assert body["data"]["task_id"] == "task-1"
        assert body["data"]["location"] == SF
        assert body["data"]["delivery_person_id"] == "unknown"
        assert body["data"]["accuracy"] == 15
        assert body["data"]["timestamp"] == "2023-11-14T22:13:20.000Z"

    def test_legacy_delivery_person_alias(self, client: TestClient) -> None:
        response = post_location(client, "task-1", deliveryPersonId="courier-7")
        assert response.json()["data"]["delivery_person_id"] == "courier-7"

    @pytest.mark.parametrize(
        "location",
        [
            {"lat": 91, "lng": 0},
            {"lat": 0, "lng": -180.5},
            {"lat": "north", "lng": 0},
            {"lat": "37.7", "lng": 0},
            {"lat": True, "lng": 0},
            {"lat": 37.7, "lng": False},
            {"lat": 10},
        ],
    )
    def test_invalid_location(self, client: TestClient, service, location) -> None:
        response = client.post("/api/delivery/task-1/location", json={"location": location})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "invalid_input"
        assert body["details"]
        assert service.get_current_location("task-1") is None

    def test_missing_location(self, client: TestClient) -> None:
        response = client.post("/api/delivery/task-1/location", json={})
        assert response.status_code == 400

    def test_negative_accuracy(self, client: TestClient) -> None:
        response = post_location(client, "task-1", accuracy=-1)
        assert response.status_code == 400

    def test_internal_failure(self, client: TestClient, service) -> None:
        with patch.object(service, "_commit", side_effect=TrackingInternalError("boom")):
            response = post_location(client, "task-1")

        assert response.status_code == 500
        assert response.json()["error"] == "internal_failure"


class TestDeliveryLocationEndpoint:
    """GET/DELETE /api/delivery/{task_id}/location"""

    def test_fresh_location(self, client: TestClient) -> None:
        post_location(client, "task-1")

        response = client.get("/api/delivery/task-1/location")

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["location"] == SF
        assert body["meta"] == {"age_seconds": 0, "is_stale": False, "staleness": "fresh"}

    def test_stale_after_five_minutes(self, client: TestClient, clock) -> None:
        post_location(client, "task-1")
        clock.advance(301_000)

        meta = client.get("/api/delivery/task-1/location").json()["meta"]

        assert meta == {"age_seconds": 301, "is_stale": True, "staleness": "stale"}

    def test_not_found(self, client: TestClient) -> None:
        response = client.get("/api/delivery/missing/location")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "not_found"
        assert body["message"] == "Task missing has no active tracking"

    def test_delete(self, client: TestClient) -> None:
        post_location(client, "task-1")

        first = client.delete("/api/delivery/task-1/location").json()
        second = client.delete("/api/delivery/task-1/location").json()

        assert first["data"] == {"deleted": True}
        assert first["message"] == "Location data cleared"
        assert second["data"] == {"deleted": False}
        assert second["message"] == "No data to clear"
        assert client.get("/api/delivery/task-1/location").status_code == 404

    def test_active_deliveries(self, client: TestClient, clock) -> None:
        post_location(client, "task-1")
        clock.advance(5_000)
        post_location(client, "task-2")

        body = client.get("/api/delivery/active").json()

        assert body["count"] == 2
        ages = {d["task_id"]: d["age_seconds"] for d in body["data"]}
        assert ages == {"task-1": 5, "task-2": 0}

    def test_active_deliveries_empty(self, client: TestClient) -> None:
        body = client.get("/api/delivery/active").json()
        assert body["data"] == []
        assert body["count"] == 0


class TestLocationEndpoints:
    """/api/location/*"""

    def test_history(self, client: TestClient) -> None:
        for _ in range(3):
            post_location(client, "task-1")

        body = client.get("/api/location/task-1").json()

        assert body["count"] == 3
        assert len(body["data"]) == 3

    def test_history_not_found(self, client: TestClient) -> None:
        response = client.get("/api/location/missing")

        assert response.status_code == 404
        assert response.json()["message"] == "Task missing has no location history"

    def test_current(self, client: TestClient) -> None:
        post_location(client, "task-1")

        response = client.get("/api/location/task-1/current")

        assert response.status_code == 200
        assert response.json()["data"]["location"] == SF

    def test_current_not_found(self, client: TestClient) -> None:
        assert client.get("/api/location/missing/current").status_code == 404

    def test_distance(self, client: TestClient) -> None:
        client.post("/api/delivery/task-1/location", json={"location": {"lat": 0, "lng": 0}})

        body = client.get("/api/location/task-1/distance", params={"lat": 1, "lng": 0}).json()

        assert body["data"]["distance_km"] == 111.195
        assert body["data"]["from_location"] == {"lat": 0, "lng": 0}
        assert body["data"]["to_location"] == {"lat": 1, "lng": 0}

    def test_distance_invalid_query(self, client: TestClient) -> None:
        post_location(client, "task-1")

        response = client.get("/api/location/task-1/distance", params={"lat": 95, "lng": 0})

        assert response.status_code == 400

    def test_distance_not_found(self, client: TestClient) -> None:
        response = client.get("/api/location/missing/distance", params={"lat": 1, "lng": 0})
        assert response.status_code == 404


class TestSubscribeEndpoint:
    """POST /api/location/{task_id}/subscribe"""

    def test_returns_current_immediately(self, client: TestClient) -> None:
        post_location(client, "task-1")

        body = client.post("/api/location/task-1/subscribe").json()

        assert body["message"] == "New location available"
        assert body["data"]["location"] == SF

    def test_no_updates_after_timeout(self, client: TestClient, service) -> None:
        timestamp = post_location(client, "task-1").json()["data"]["timestamp"]

        body = client.post(
            "/api/location/task-1/subscribe", json={"lastTimestamp": timestamp}
        ).json()

        assert body["success"] is True
        assert body["data"] is None
        assert body["message"] == "No new updates"
        assert service.subscriber_count("task-1") == 0

    def test_unknown_task_times_out(self, client: TestClient) -> None:
        body = client.post("/api/location/missing/subscribe", json={}).json()
        assert body["data"] is None


class TestServiceEndpoints:
    """/health, /, /stats и общие ошибки."""

    def test_health(self, client: TestClient) -> None:
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["service"] == "maps_backend"
        assert body["version"] == "1.0.0"
        assert body["timestamp"].endswith("Z")
        assert body["uptime_seconds"] >= 0
        assert "dependencies" not in body

    def test_root(self, client: TestClient) -> None:
        body = client.get("/").json()

        assert body["message"] == "Maps Backend API"
        assert "subscribe" in body["endpoints"]

    def test_stats(self, client: TestClient) -> None:
        post_location(client, "task-1")
        post_location(client, "task-1")

        body = client.get("/stats").json()

        assert body == {"active_deliveries": 1, "total_history_entries": 2, "subscriber_tasks": 0}

    def test_unknown_route(self, client: TestClient) -> None:
        response = client.get("/api/nothing")

        assert response.status_code == 404
        assert response.json()["details"] == {"path": "/api/nothing"}

    def test_cors_preflight(self, client: TestClient) -> None:
        response = client.options(
            "/api/delivery/task-1/location",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


class TestLifespan:
    """Тесты жизненного цикла приложения."""

    def test_creates_app(self, app_settings) -> None:
        assert isinstance(create_app(app_settings=app_settings), FastAPI)

    def test_builds_service_and_worker(self, app_settings) -> None:
        app = create_app(app_settings=app_settings)

        with TestClient(app) as test_client:
            assert app.state.cleanup_worker.is_running is True
            assert test_client.get("/stats").status_code == 200

        assert app.state.tracking_service is None
        assert app.state.cleanup_worker is None
