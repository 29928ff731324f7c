"""
Shared pytest fixtures for backend tests.
The language model is replaced by a fake client; nothing leaves the process.
"""
import pytest
import sys
import os
from datetime import datetime, timezone
from types import SimpleNamespace

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import Task


class FakeMessages:
    """Stands in for client.messages; replays a canned reply or raises."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        content = [] if self.reply is None else [SimpleNamespace(type="text", text=self.reply)]
        return SimpleNamespace(content=content)


class FakeAnthropic:
    def __init__(self, reply=None, error=None):
        self.messages = FakeMessages(reply, error)


@pytest.fixture
def fake_llm():
    """Factory for fake Anthropic clients: fake_llm(reply=...) or fake_llm(error=...)."""
    return FakeAnthropic


@pytest.fixture
def now():
    """Fixed clock: Wednesday 2025-03-12 15:30 UTC."""
    return datetime(2025, 3, 12, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_task():
    """Factory for tasks with sensible defaults."""
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        fields.setdefault("id", f"task-{counter['n']}")
        fields.setdefault("title", f"Task {counter['n']}")
        fields.setdefault("created_at", datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))
        return Task(**fields)

    return _make


@pytest.fixture
def app_client(monkeypatch, fake_llm):
    """
    Test client for the FastAPI app.
    The module-level Anthropic client is swapped for a fake that tests can program.
    """
    from fastapi.testclient import TestClient
    import intent
    import main
    from config import config

    fake = fake_llm(reply='{"intent": "CAPTURE_TASK", "task": {"title": "Buy milk"}}')
    monkeypatch.setitem(config, "anthropic_api_key", "test-key")
    monkeypatch.setattr(intent, "_client", fake)

    with TestClient(main.app) as client:
        client.fake_llm = fake
        yield client
