"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end.
"""

from datetime import timedelta

from fastapi.testclient import TestClient

from taskmind.temporal.normalizer import month_bounds, now as current_time, to_storage_string

PAST_DUE = "01/03/2020 23:59"
FUTURE_DUE = "2099-12-31T23:59:00"


def _create_task(test_client: TestClient, **fields) -> dict:
    response = test_client.post("/tasks", json={"title": "Test Task", **fields})
    assert response.status_code == 201, response.text
    return response.json()["task"]


def _create_event(test_client: TestClient, **fields) -> dict:
    response = test_client.post("/events", json={"title": "Test Event", **fields})
    assert response.status_code == 201, response.text
    return response.json()["event"]


class TestHealth:
    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestTaskEndpoints:
    """Test task CRUD API endpoints."""

    def test_create_task(self, test_client):
        """Test POST /tasks endpoint."""
        task = _create_task(test_client, subject="Cálculo I", due_at="15/03/2099 23:59", priority="high")

        assert task["title"] == "Test Task"
        assert task["subject"] == "Cálculo I"
        assert task["priority"] == "high"
        assert task["status"] == "pending"
        assert task["effective_status"] == "pending"
        assert task["due_at"] == "2099-03-15 23:59:00"
        assert task["due_at_display"] == "15/03/2099 23:59"
        assert task["days_remaining"] > 0
        assert task["badge"]["label"] == "Pendente"

    def test_create_task_iso_and_br_agree(self, test_client):
        from_picker = _create_task(test_client, due_at="2099-03-05T10:00:00")
        from_text = _create_task(test_client, due_at="05/03/2099 10:00")
        assert from_picker["due_at"] == from_text["due_at"] == "2099-03-05 10:00:00"

    def test_create_task_without_due_date(self, test_client):
        task = _create_task(test_client, due_at="")
        assert task["due_at"] is None
        assert task["days_remaining"] is None
        assert task["effective_status"] == "pending"

    def test_create_task_invalid_due_date(self, test_client):
        """An unrecognizable date is rejected and nothing is stored."""
        response = test_client.post("/tasks", json={"title": "Bad", "due_at": "31/02/2024"})

        assert response.status_code == 400
        body = response.json()
        assert body["field"] == "due_at"
        assert body["value"] == "31/02/2024"
        assert test_client.get("/tasks").json()["count"] == 0

    def test_create_task_requires_title(self, test_client):
        response = test_client.post("/tasks", json={"title": ""})
        assert response.status_code == 422

    def test_past_due_task_is_overdue(self, test_client):
        task = _create_task(test_client, due_at=PAST_DUE)
        assert task["status"] == "pending"
        assert task["effective_status"] == "overdue"
        assert task["badge"]["label"] == "Atrasada"
        assert task["days_remaining"] < 0

    def test_get_task(self, test_client):
        created = _create_task(test_client)
        response = test_client.get(f"/tasks/{created['id']}")
        assert response.status_code == 200
        assert response.json()["task"]["id"] == created["id"]

    def test_get_missing_task(self, test_client):
        assert test_client.get("/tasks/nonexistent-id").status_code == 404

    def test_update_task(self, test_client):
        created = _create_task(test_client, due_at=FUTURE_DUE)
        response = test_client.put(
            f"/tasks/{created['id']}",
            json={"title": "Renamed", "status": "in_progress"},
        )
        assert response.status_code == 200
        task = response.json()["task"]
        assert task["title"] == "Renamed"
        assert task["status"] == "in_progress"
        assert task["due_at"] == "2099-12-31 23:59:00"

    def test_update_task_clears_due_date(self, test_client):
        created = _create_task(test_client, due_at=PAST_DUE)
        task = test_client.put(f"/tasks/{created['id']}", json={"due_at": None}).json()["task"]
        assert task["due_at"] is None
        assert task["effective_status"] == "pending"

    def test_update_task_invalid_due_date_leaves_task_unchanged(self, test_client):
        created = _create_task(test_client, due_at=FUTURE_DUE)
        response = test_client.put(f"/tasks/{created['id']}", json={"title": "Changed", "due_at": "2099-02-30"})

        assert response.status_code == 400
        assert response.json()["field"] == "due_at"
        task = test_client.get(f"/tasks/{created['id']}").json()["task"]
        assert task["title"] == "Test Task"
        assert task["due_at"] == "2099-12-31 23:59:00"

    def test_complete_overdue_task(self, test_client):
        """Finishing a late task makes it completed, not overdue."""
        created = _create_task(test_client, due_at=PAST_DUE)
        assert created["effective_status"] == "overdue"

        response = test_client.patch(f"/tasks/{created['id']}/complete", json={"grade": 9.0})
        assert response.status_code == 200
        task = response.json()["task"]
        assert task["status"] == "completed"
        assert task["effective_status"] == "completed"
        assert task["grade"] == 9.0
        assert task["completed_at"] is not None
        assert task["days_remaining"] is None

    def test_complete_without_body(self, test_client):
        created = _create_task(test_client)
        response = test_client.patch(f"/tasks/{created['id']}/complete")
        assert response.status_code == 200
        assert response.json()["task"]["status"] == "completed"

    def test_reopen_completed_task_conflicts(self, test_client):
        created = _create_task(test_client, status="completed")
        response = test_client.put(f"/tasks/{created['id']}", json={"status": "pending"})

        assert response.status_code == 409
        assert response.json()["current"] == "completed"
        assert response.json()["requested"] == "pending"

    def test_delete_task(self, test_client):
        created = _create_task(test_client)
        assert test_client.delete(f"/tasks/{created['id']}").status_code == 204
        assert test_client.get(f"/tasks/{created['id']}").status_code == 404
        assert test_client.delete(f"/tasks/{created['id']}").status_code == 404


class TestTaskListing:
    """Test GET /tasks ordering and filters."""

    def test_list_ordered_by_due_date(self, test_client):
        _create_task(test_client, title="No date")
        _create_task(test_client, title="Later", due_at="2099-06-01")
        _create_task(test_client, title="Sooner", due_at="01/05/2099")

        body = test_client.get("/tasks").json()
        assert body["count"] == 3
        assert [t["title"] for t in body["tasks"]] == ["Sooner", "Later", "No date"]

    def test_filter_by_effective_status(self, test_client):
        _create_task(test_client, title="Late", due_at=PAST_DUE)
        _create_task(test_client, title="On time", due_at=FUTURE_DUE)

        overdue = test_client.get("/tasks", params={"status": "overdue"}).json()
        pending = test_client.get("/tasks", params={"status": "pending"}).json()
        assert [t["title"] for t in overdue["tasks"]] == ["Late"]
        assert [t["title"] for t in pending["tasks"]] == ["On time"]

    def test_filter_by_subject_and_priority(self, test_client):
        _create_task(test_client, title="A", subject="Física", priority="high")
        _create_task(test_client, title="B", subject="Física", priority="low")
        _create_task(test_client, title="C", subject="Química", priority="high")

        body = test_client.get("/tasks", params={"subject": "Física", "priority": "high"}).json()
        assert [t["title"] for t in body["tasks"]] == ["A"]

    def test_invalid_status_filter(self, test_client):
        assert test_client.get("/tasks", params={"status": "late"}).status_code == 422


class TestEventEndpoints:
    """Test event CRUD API endpoints."""

    def test_create_event(self, test_client):
        event = _create_event(test_client, starts_at="20/03/2099 10:00", ends_at="2099-03-20T12:00:00", event_type="exam")
        assert event["starts_at"] == "2099-03-20 10:00:00"
        assert event["starts_at_display"] == "20/03/2099 10:00"
        assert event["ends_at"] == "2099-03-20 12:00:00"

    def test_create_event_invalid_start(self, test_client):
        response = test_client.post("/events", json={"title": "Bad", "starts_at": "20/13/2099"})
        assert response.status_code == 400
        assert response.json()["field"] == "starts_at"

    def test_create_event_blank_start(self, test_client):
        response = test_client.post("/events", json={"title": "Bad", "starts_at": " "})
        assert response.status_code == 400
        assert response.json()["field"] == "starts_at"

    def test_create_event_ending_before_start(self, test_client):
        response = test_client.post(
            "/events",
            json={"title": "Bad", "starts_at": "20/03/2099 10:00", "ends_at": "20/03/2099 09:00"},
        )
        assert response.status_code == 400
        assert response.json()["field"] == "ends_at"

    def test_update_and_delete_event(self, test_client):
        created = _create_event(test_client, starts_at="20/03/2099 10:00")

        response = test_client.put(f"/events/{created['id']}", json={"starts_at": "21/03/2099 10:00"})
        assert response.status_code == 200
        assert response.json()["event"]["starts_at"] == "2099-03-21 10:00:00"

        assert test_client.get("/events").json()["count"] == 1
        assert test_client.delete(f"/events/{created['id']}").status_code == 204
        assert test_client.get(f"/events/{created['id']}").status_code == 404


class TestDashboardEndpoints:
    """Test dashboard, calendar and performance endpoints."""

    def test_dashboard(self, test_client):
        _create_task(test_client, title="Late", due_at=PAST_DUE)
        _create_task(test_client, title="Next", due_at=FUTURE_DUE)
        _create_task(test_client, title="Done", status="completed", grade=8.0)
        _create_event(test_client, title="Exam", starts_at=FUTURE_DUE)

        body = test_client.get("/dashboard").json()
        stats = body["statistics"]
        assert stats["total"] == 3
        assert stats["overdue"] == 1
        assert stats["pending"] == 1
        assert stats["completed"] == 1
        assert stats["average_grade"] == 8.0
        assert [t["title"] for t in body["tasks"]["overdue"]] == ["Late"]
        assert [t["title"] for t in body["tasks"]["upcoming"]] == ["Next"]
        assert [e["title"] for e in body["events"]["upcoming"]] == ["Exam"]
        assert body["monthly_performance"]["month"] == to_storage_string(current_time())[:7]

    def test_calendar_range(self, test_client):
        _create_event(test_client, title="In range", starts_at="10/03/2099 09:00")
        _create_event(test_client, title="Out of range", starts_at="10/04/2099 09:00")
        _create_task(test_client, title="Due in range", due_at="31/03/2099")

        response = test_client.get("/dashboard/calendar", params={"start": "01/03/2099", "end": "2099-03-31T23:59:59"})
        assert response.status_code == 200
        body = response.json()
        assert body["start"] == "2099-03-01 00:00:00"
        assert body["end"] == "2099-03-31 23:59:59"
        assert [e["title"] for e in body["events"]] == ["In range"]
        assert [t["title"] for t in body["tasks"]] == ["Due in range"]

    def test_calendar_defaults_to_current_month(self, test_client):
        now = current_time()
        _create_event(test_client, title="Now", starts_at=to_storage_string(now))
        _create_event(test_client, title="Far", starts_at=to_storage_string(now + timedelta(days=400)))

        body = test_client.get("/dashboard/calendar").json()
        assert [e["title"] for e in body["events"]] == ["Now"]

    def test_calendar_default_range_excludes_first_of_next_month(self, test_client):
        """A date-only value on the 1st of next month lands at midnight and belongs to next month."""
        start, next_month = month_bounds(current_time())
        _create_task(test_client, title="This month", due_at=to_storage_string(start))
        _create_task(test_client, title="Next month", due_at=next_month.strftime("%Y-%m-%d"))
        _create_event(test_client, title="Next month", starts_at=next_month.strftime("%d/%m/%Y"))

        body = test_client.get("/dashboard/calendar").json()
        assert body["end"] == to_storage_string(next_month - timedelta(seconds=1))
        assert [t["title"] for t in body["tasks"]] == ["This month"]
        assert body["events"] == []

    def test_calendar_invalid_bound(self, test_client):
        response = test_client.get("/dashboard/calendar", params={"start": "yesterday"})
        assert response.status_code == 400
        assert response.json()["field"] == "start"

    def test_calendar_reversed_range(self, test_client):
        response = test_client.get("/dashboard/calendar", params={"start": "31/03/2099", "end": "01/03/2099"})
        assert response.status_code == 400

    def test_create_event_from_calendar(self, test_client):
        response = test_client.post("/dashboard/calendar", json={"title": "Aula", "starts_at": "2099-03-10"})
        assert response.status_code == 201
        assert response.json()["event"]["starts_at"] == "2099-03-10 00:00:00"

    def test_performance(self, test_client):
        _create_task(test_client, title="Done", status="completed", grade=6.0)
        _create_task(test_client, title="Open")

        body = test_client.get("/dashboard/performance", params={"months": 3}).json()
        assert len(body["history"]) == 3
        assert body["history"][0]["month"] == to_storage_string(current_time())[:7]
        assert body["overall"]["total_tasks"] == 2
        assert body["overall"]["completed_tasks"] == 1
        assert body["overall"]["average_grade"] == 6.0

    def test_performance_months_bounds(self, test_client):
        assert test_client.get("/dashboard/performance", params={"months": 0}).status_code == 422
        assert test_client.get("/dashboard/performance", params={"months": 25}).status_code == 422


class TestProfileEndpoints:
    def test_get_profile(self, test_client, test_user_id):
        body = test_client.get("/users/me").json()
        assert body["user"]["id"] == test_user_id
        assert body["user"]["email"] == "test@example.com"

    def test_update_profile(self, test_client):
        response = test_client.put(
            "/users/me",
            json={"course": "Engenharia de Software", "semester": 4, "birth_date": "07/09/2001"},
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["course"] == "Engenharia de Software"
        assert user["semester"] == 4
        assert user["birth_date"] == "2001-09-07"

    def test_update_profile_invalid_birth_date(self, test_client):
        response = test_client.put("/users/me", json={"birth_date": "31/02/2001"})
        assert response.status_code == 400
        assert response.json()["field"] == "birth_date"
