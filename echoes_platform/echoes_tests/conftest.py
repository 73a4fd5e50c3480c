"""
Pytest configuration for echoes_service tests.

Points the service at an in-memory database and a fixed signing secret
before any service module is imported.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-signing-secret-0123456789abcdef"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["LOG_DIR"] = ""

import pytest
from fastapi.testclient import TestClient

from echoes_platform.echoes_service.db import Base, engine
from echoes_platform.echoes_service.main import app
from echoes_platform.echoes_service.routes.echo import get_completion_client
from echoes_platform.echoes_service import models  # noqa: F401

TEST_SECRET = os.environ["JWT_SECRET"]


class FakeCompletionClient:
    """Stands in for CompletionClient; records what it was asked."""

    def __init__(self, reply="Echo reply", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def complete(self, user_text):
        self.calls.append(user_text)
        if self.error is not None:
            raise self.error
        return f"{self.reply}: {user_text}"


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def secret():
    return TEST_SECRET


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def fake_completion():
    fake = FakeCompletionClient()
    app.dependency_overrides[get_completion_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_completion_client, None)
