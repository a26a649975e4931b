"""HTTP contract tests for the tracking API."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from nutritrack.main import app


@pytest.fixture
def client(services):
    return TestClient(app)


def test_healthz(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers.get("x-request-id")


def test_readyz_reports_memory_storage(client):
    assert client.get("/readyz").json() == {"ok": True, "storage": "memory"}


def test_streak_advance_and_state(client):
    response = client.post("/v1/streaks/advance", json={"user_id": "u1", "goal_met": True})

    assert response.status_code == 200
    body = response.json()
    assert body["record"]["current_streak"] == 1
    assert body["state"]["today_completed"] is True

    current = client.get("/v1/streaks/current", params={"user_id": "u1"}).json()
    assert current["current_streak"] == 1
    assert current["level"] == "bronze"


def test_streak_history(client):
    client.post("/v1/streaks/advance", json={"user_id": "u1"})

    history = client.get("/v1/streaks/history", params={"user_id": "u1", "days": 7}).json()["history"]

    assert len(history) == 7
    assert history[-1]["completed"] is True


def test_streak_write_failure_maps_to_503(client, services, monkeypatch):
    monkeypatch.setattr(services.streaks, "advance", lambda *args, **kwargs: None)

    response = client.post("/v1/streaks/advance", json={"user_id": "u1"})

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "persistence_unavailable"


def test_complete_task(client):
    response = client.post("/v1/tasks/dinner/complete", json={"user_id": "u1"})

    assert response.status_code == 200
    completed = [t["id"] for t in response.json()["tasks"] if t["completed"]]
    assert completed == ["dinner"]

    listed = client.get("/v1/tasks", params={"user_id": "u1"}).json()
    assert listed["incomplete"] == 3


def test_unknown_task_returns_error_envelope(client):
    response = client.post("/v1/tasks/snack/complete", json={"user_id": "u1"}, headers={"x-request-id": "rid-123"})

    assert response.status_code == 404
    payload = response.json()
    assert payload["error"]["code"] == "unknown_task"
    assert payload["error"]["request_id"] == "rid-123"
    assert response.headers["x-request-id"] == "rid-123"


def test_reminders_for_hour(client):
    client.post("/v1/tasks/breakfast/complete", json={"user_id": "u1"})

    reminders = client.get("/v1/tasks/reminders", params={"user_id": "u1", "hour": 21}).json()["reminders"]

    labels = [r["action"]["label"] for r in reminders]
    assert labels == ["Log Lunch", "Log Dinner", "Log Water", "View Tasks"]


def test_reminders_reject_bad_hour(client):
    assert client.get("/v1/tasks/reminders", params={"user_id": "u1", "hour": 25}).status_code == 422


def test_meal_flow_updates_everything(client):
    response = client.post(
        "/v1/tracking/meals",
        json={
            "user_id": "u1",
            "meal_type": "lunch",
            "items": [{"name": "Soup", "calories": 250, "protein": 9, "carbs": 30, "fat": 8}],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["activity"]["activity_type"] == "meal_logged"
    assert body["streak"]["current_streak"] == 1
    assert [t["id"] for t in body["tasks"] if t["completed"]] == ["lunch"]

    activities = client.get("/v1/activities", params={"user_id": "u1"}).json()["activities"]
    assert {a["activity_type"] for a in activities} >= {"meal_logged", "task_completed", "streak_updated"}

    summary = client.get("/v1/tracking/summary", params={"user_id": "u1"}).json()
    assert summary["totals"]["calories"] == 250


def test_water_and_goals(client):
    water = client.post("/v1/tracking/water", json={"user_id": "u1", "amount_ml": 400})
    goals = client.post(
        "/v1/tracking/goals",
        json={"user_id": "u1", "calorie_goal": 2200, "protein_goal": 130, "carbs_goal": 260, "fat_goal": 70},
    )

    assert water.status_code == 200
    assert goals.status_code == 200
    assert goals.json()["streak"] is None
    filtered = client.get("/v1/activities", params={"user_id": "u1", "activity_type": "goal_set"}).json()
    assert len(filtered["activities"]) == 1


def test_invalid_water_amount_rejected(client):
    response = client.post("/v1/tracking/water", json={"user_id": "u1", "amount_ml": 0})

    assert response.status_code == 422


def test_reminder_socket_pushes_reminders(client, monkeypatch):
    from nutritrack.api import reminders as reminders_api
    from nutritrack.features.tasks.reminders import ReminderLoop

    def evening_loop(scheduler, user_id, deliver):
        return ReminderLoop(scheduler, user_id, deliver, interval=3600, clock=lambda: datetime(2024, 3, 1, 22, 0))

    monkeypatch.setattr(reminders_api, "ReminderLoop", evening_loop)

    with client.websocket_connect("/v1/ws/reminders?user_id=u1") as ws:
        messages = [ws.receive_json() for _ in range(5)]

    assert all(m["type"] == "reminder" for m in messages)
    assert messages[0]["payload"]["title"] == "Daily Task Reminder"
    assert messages[-1]["payload"]["action"]["label"] == "View Tasks"


def test_reminder_socket_requires_user(client):
    with client.websocket_connect("/v1/ws/reminders") as ws:
        message = ws.receive_json()

    assert message["type"] == "error"
    assert message["error"]["code"] == "validation_error"
