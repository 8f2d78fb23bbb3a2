"""Test configuration module."""

from typing import List

import pytest
from fastapi.testclient import TestClient

from main import app
from notifier import get_notifier
from schemas import ContactSubmission


class RecordingNotifier:
    def __init__(self):
        self.received: List[ContactSubmission] = []

    def notify(self, submission: ContactSubmission) -> None:
        self.received.append(submission)


@pytest.fixture
def notifier():
    recorder = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recorder
    yield recorder
    app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture
def client(notifier) -> TestClient:
    return TestClient(app)


@pytest.fixture
def valid_payload():
    return {"name": "Taro", "email": "taro@example.com", "message": "1234567890"}
