"""
Tests for FastAPI endpoints in main.py.
The /intent endpoint talks to the fake Anthropic client from conftest.py.
"""
import pytest
import sys
import os

import anthropic
import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

NOW = "2025-03-12T15:30:00+00:00"


def _task(task_id, **fields):
    task = {"id": task_id, "title": f"Task {task_id}", "created_at": "2025-03-01T09:00:00+00:00"}
    task.update(fields)
    return task


class TestTagEndpoints:
    """Tests for /tags endpoints."""

    def test_get_tags(self, app_client):
        """GET /tags lists the vocabulary by category."""
        response = app_client.get("/tags")
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"headspace", "energy", "duration", "domain"}
        assert body["energy"][0] == {
            "tag": "QuickWin",
            "label": "Quick Win",
            "color": "emerald",
            "category": "energy",
            "description": "Takes < 5 mins, low friction",
        }

    def test_get_unknown_tag(self, app_client):
        """GET /tags/{tag} falls back for custom tags."""
        response = app_client.get("/tags/Dinner")
        assert response.status_code == 200
        assert response.json()["label"] == "Dinner"
        assert response.json()["category"] == "domain"


class TestIntentEndpoint:
    """Tests for POST /intent."""

    def test_capture(self, app_client):
        """Model output is normalized into a command."""
        response = app_client.post("/intent", json={"free_text": "buy milk"})
        assert response.status_code == 200
        body = response.json()
        assert body["error"] is None
        assert body["command"]["kind"] == "capture_task"
        assert body["command"]["title"] == "Buy milk"
        assert body["command"]["status"] == "Active"
        assert body["command"]["source"] == {"type": "manual", "id": None}

    def test_view(self, app_client):
        """View replies come back as apply_view commands."""
        app_client.fake_llm.messages.reply = (
            '{"intent": "GENERATE_VIEW", "view": {"view_name": "Deep Focus", '
            '"filters": {"tags": ["DeepFocus"], "date_scope": "ThisWeek"}}}'
        )
        response = app_client.post("/intent", json={"free_text": "deep work mode", "view_context": "master"})
        command = response.json()["command"]
        assert command["kind"] == "apply_view"
        assert command["filters"] == {
            "tags": ["DeepFocus"],
            "status": [],
            "date_scope": "ThisWeek",
            "action_date_range": None,
        }

    def test_malformed_reply(self, app_client):
        """Unparseable model output is reported in-band."""
        app_client.fake_llm.messages.reply = "I could not do that"
        response = app_client.post("/intent", json={"free_text": "buy milk"})
        assert response.status_code == 200
        assert response.json()["command"] is None
        assert response.json()["error"]["kind"] == "malformed"

    def test_service_down(self, app_client):
        """API failures are reported in-band as unavailable."""
        app_client.fake_llm.messages.error = anthropic.APIConnectionError(
            request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        )
        response = app_client.post("/intent", json={"free_text": "buy milk"})
        assert response.json()["error"]["kind"] == "unavailable"

    def test_unknown_view_context_rejected(self, app_client):
        """Request bodies are validated."""
        response = app_client.post("/intent", json={"free_text": "x", "view_context": "kitchen"})
        assert response.status_code == 422


class TestTaskListEndpoints:
    """Tests for /tasks/filter, /tasks/today and /tasks/search."""

    def test_filter_tags_and_order(self, app_client):
        """POST /tasks/filter applies facets and sorts newest first."""
        tasks = [
            _task("1", tags=["Work"]),
            _task("2", tags=["Work", "DeepFocus"], created_at="2025-03-02T09:00:00+00:00"),
            _task("3", tags=["Work", "DeepFocus"]),
            _task("4", tags=["Work", "DeepFocus"], is_completed=True, action_date="2025-03-30"),
        ]
        response = app_client.post("/tasks/filter", json={
            "tasks": tasks,
            "filters": {"tags": ["Work", "DeepFocus"]},
            "now": NOW,
        })
        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == ["2", "3", "4"]

    def test_filter_overdue(self, app_client):
        """Completed tasks never show up as overdue."""
        tasks = [
            _task("open", action_date="2025-03-11"),
            _task("done", action_date="2025-03-11", is_completed=True),
        ]
        response = app_client.post("/tasks/filter", json={
            "tasks": tasks,
            "filters": {"date_scope": "Overdue"},
            "now": NOW,
        })
        assert [t["id"] for t in response.json()] == ["open"]

    def test_filter_empty(self, app_client):
        """No tasks is a valid input."""
        response = app_client.post("/tasks/filter", json={"tasks": []})
        assert response.status_code == 200
        assert response.json() == []

    def test_today_list(self, app_client):
        """POST /tasks/today orders by status and narrows by title."""
        tasks = [
            _task("w", title="Email landlord", status="WaitingOn", created_at="2025-03-05T09:00:00+00:00"),
            _task("a", title="Email accountant", status="Active"),
            _task("x", title="Walk dog"),
        ]
        response = app_client.post("/tasks/today", json={"tasks": tasks, "now": NOW, "search": "email"})
        assert [t["id"] for t in response.json()] == ["a", "w"]

    def test_library_search(self, app_client):
        """POST /tasks/search matches titles and tags."""
        tasks = [_task("t", title="Book flight", tags=["Travel"]), _task("o", title="Other")]
        response = app_client.post("/tasks/search", json={"tasks": tasks, "now": NOW, "search": "travel"})
        assert [t["id"] for t in response.json()] == ["t"]

    def test_blank_title_rejected(self, app_client):
        """Tasks must have a title."""
        response = app_client.post("/tasks/filter", json={"tasks": [_task("1", title="  ")]})
        assert response.status_code == 422


class TestLegacyEndpoint:
    """Tests for POST /legacy/migrate."""

    def test_migrate(self, app_client):
        """Legacy records come back as tagged tasks."""
        response = app_client.post("/legacy/migrate", json=[{
            "id": "old-1",
            "title": "Finalize Q3 slides",
            "area": "Professional",
            "energy": "High",
            "time_estimate": "45min",
            "due_date": "2025-03-14",
            "created_at": "2025-01-01T00:00:00+00:00",
        }])
        assert response.status_code == 200
        task = response.json()[0]
        assert task["tags"] == ["Work", "HeavyLift", "Minutes", "DeepFocus"]
        assert task["action_date"] == "2025-03-14"
        assert task["status"] == "Active"
