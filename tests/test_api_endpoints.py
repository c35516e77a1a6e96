"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end.
"""

from datetime import date

from fastapi.testclient import TestClient

TODAY = "2025-01-06"


def _task_payload(**overrides):
    payload = {
        "name": "Write report",
        "category": {"id": "cat-work", "name": "Work", "color": "#2563eb", "daily_limit": 2},
        "due_date": TODAY,
        "estimated_hours": 1.5,
    }
    payload.update(overrides)
    return payload


def _create(test_client: TestClient, headers, **overrides):
    return test_client.post("/tasks", params={"today": TODAY}, json=_task_payload(**overrides), headers=headers)


class TestAuth:
    """Test caller identification."""

    def test_health_needs_no_user(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_missing_user_header(self, test_client):
        response = test_client.get("/tasks")
        assert response.status_code == 401


class TestTaskEndpoints:
    """Test task API endpoints."""

    def test_create_task(self, test_client, auth_headers):
        response = _create(test_client, auth_headers)

        assert response.status_code == 201
        task = response.json()["task"]
        assert task["name"] == "Write report"
        assert task["category"]["name"] == "Work"
        assert task["start_date"].startswith(TODAY)
        assert response.json()["check"]["allowed"] is True

        listed = test_client.get("/tasks", headers=auth_headers).json()["tasks"]
        assert [t["id"] for t in listed] == [task["id"]]

    def test_validation_errors(self, test_client, auth_headers):
        assert _create(test_client, auth_headers, name="ab").status_code == 422
        assert _create(test_client, auth_headers, estimated_hours=30).status_code == 422
        assert _create(test_client, auth_headers, is_recurring=True).status_code == 422
        assert _create(test_client, auth_headers, is_recurring=True, recurring_interval="weekly").status_code == 422
        assert _create(
            test_client, auth_headers,
            is_recurring=True, recurring_interval="daily", recurring_end_type="after",
        ).status_code == 422
        bad_color = _task_payload()
        bad_color["category"]["color"] = "blue"
        response = test_client.post("/tasks", json=bad_color, headers=auth_headers)
        assert response.status_code == 422

    def test_category_limit_conflict(self, test_client, auth_headers):
        assert _create(test_client, auth_headers, name="First task").status_code == 201
        assert _create(test_client, auth_headers, name="Second task").status_code == 201

        response = _create(test_client, auth_headers, name="Third task")

        assert response.status_code == 409
        assert response.json()["detail"] == (
            "You've reached your daily limit of 2 tasks for Work. Focus on completing existing tasks first."
        )

    def test_future_task_bypasses_limit(self, test_client, auth_headers):
        for name in ("First task", "Second task"):
            _create(test_client, auth_headers, name=name)
        response = _create(test_client, auth_headers, name="Next week", due_date="2025-01-13")
        assert response.status_code == 201

    def test_recurring_task_is_expanded(self, test_client, auth_headers):
        response = _create(
            test_client, auth_headers,
            name="Stand-up notes",
            is_recurring=True,
            recurring_interval="weekly",
            recurring_days=[1, 3, 5],
        )
        assert response.status_code == 201

        tasks = test_client.get("/tasks", headers=auth_headers).json()["tasks"]
        series = {t["recurring_series_id"] for t in tasks}
        assert len(series) == 1
        assert len(tasks) > 1

    def test_edit_task(self, test_client, auth_headers):
        task_id = _create(test_client, auth_headers).json()["task"]["id"]

        response = test_client.put(
            f"/tasks/{task_id}", params={"today": TODAY}, json={"name": "Write summary"}, headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["task"]["name"] == "Write summary"

    def test_edit_unknown_task(self, test_client, auth_headers):
        response = test_client.put("/tasks/nope", json={"name": "Whatever"}, headers=auth_headers)
        assert response.status_code == 404

    def test_complete_task(self, test_client, auth_headers):
        task_id = _create(test_client, auth_headers).json()["task"]["id"]

        response = test_client.post(f"/tasks/{task_id}/complete", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["task"]["completed"] is True
        assert data["streak"]["current_streak"] == 1
        assert data["streak"]["last_completed_date"] == date.today().isoformat()

        streak = test_client.get("/streak", headers=auth_headers).json()
        assert streak["streak"]["current_streak"] == 1
        assert streak["next_milestone"] == 3

    def test_complete_unknown_task(self, test_client, auth_headers):
        response = test_client.post("/tasks/nope/complete", headers=auth_headers)
        assert response.status_code == 404


class TestScheduleEndpoints:
    """Test schedule recompute and views."""

    def test_schedule_and_today(self, test_client, auth_headers):
        _create(test_client, auth_headers, name="Due today")
        _create(test_client, auth_headers, name="Later", due_date="2025-01-20")

        response = test_client.post("/schedule", params={"today": TODAY}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["reference_date"] == TODAY
        assert len(data["tasks"]) == 2
        assert data["overflow_tasks"] == []

        today = test_client.get("/schedule/today", params={"today": TODAY}, headers=auth_headers).json()
        assert {t["name"] for t in today["tasks"]} == {"Due today", "Later"}

    def test_schedule_empty_pool(self, test_client, auth_headers):
        response = test_client.post("/schedule", params={"today": TODAY}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["tasks"] == []


class TestPreferenceEndpoints:
    """Test preferences and streak endpoints."""

    def test_defaults(self, test_client, auth_headers):
        prefs = test_client.get("/preferences", headers=auth_headers).json()
        assert prefs["max_daily_tasks"] == 4
        assert prefs["category_limits"]["Work"] == {"weekday_max": 10.0, "weekend_max": 10.0}

    def test_put_normalizes_loose_payload(self, test_client, auth_headers):
        response = test_client.put(
            "/preferences",
            json={"maxDailyTasks": "3", "categoryLimits": {"Home": {"max": "2"}}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["max_daily_tasks"] == 3
        stored = test_client.get("/preferences", headers=auth_headers).json()
        assert stored["category_limits"]["Home"] == {"weekday_max": 2.0, "weekend_max": 2.0}

    def test_dismiss_celebration(self, test_client, auth_headers):
        response = test_client.post("/streak/dismiss", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["streak"]["milestone_celebration"] is None

    def test_sync_streak_merges_with_stored(self, test_client, auth_headers):
        newer = {"current_streak": 5, "longest_streak": 8, "last_completed_date": "2025-01-05"}
        response = test_client.put("/streak", json=newer, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["streak"]["current_streak"] == 5
        assert response.json()["next_milestone"] == 7

        older = {"current_streak": 2, "longest_streak": 2, "last_completed_date": "2025-01-01"}
        merged = test_client.put("/streak", json=older, headers=auth_headers).json()["streak"]

        assert merged["current_streak"] == 5
        assert merged["longest_streak"] == 8
        assert merged["last_completed_date"] == "2025-01-05"
        stored = test_client.get("/streak", headers=auth_headers).json()["streak"]
        assert stored == merged
