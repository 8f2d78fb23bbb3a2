"""Tests for the contact submission endpoint."""

import logging

from fastapi.testclient import TestClient

from main import INVALID_INPUT_MESSAGE, SERVER_ERROR_MESSAGE, SUCCESS_MESSAGE, app
from notifier import get_notifier
from schemas import EMAIL_INVALID, MESSAGE_TOO_LONG, NAME_TOO_SHORT


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Contact form API is running"}


def test_valid_submission_returns_success(client, notifier, valid_payload):
    response = client.post("/api/contact", json=valid_payload)

    assert response.status_code == 200
    assert response.json() == {"message": SUCCESS_MESSAGE}
    assert len(notifier.received) == 1
    assert notifier.received[0].model_dump() == valid_payload


def test_short_name_returns_field_errors(client, notifier, valid_payload):
    response = client.post("/api/contact", json={**valid_payload, "name": "T"})

    assert response.status_code == 400
    data = response.json()
    assert data["message"] == INVALID_INPUT_MESSAGE
    assert data["errors"] == {"name": [NAME_TOO_SHORT]}
    assert notifier.received == []


def test_two_character_name_is_accepted(client, valid_payload):
    response = client.post("/api/contact", json={**valid_payload, "name": "Ta"})

    assert response.status_code == 200


def test_message_length_bounds_over_http(client, notifier, valid_payload):
    longest = client.post("/api/contact", json={**valid_payload, "message": "x" * 500})
    too_long = client.post("/api/contact", json={**valid_payload, "message": "x" * 501})

    assert longest.status_code == 200
    assert too_long.status_code == 400
    assert too_long.json()["errors"] == {"message": [MESSAGE_TOO_LONG]}
    assert len(notifier.received) == 1


def test_invalid_email_returns_field_errors(client, valid_payload):
    response = client.post("/api/contact", json={**valid_payload, "email": "not-an-email"})

    assert response.status_code == 400
    assert response.json()["errors"]["email"] == [EMAIL_INVALID]


def test_non_object_json_is_a_validation_failure(client):
    response = client.post("/api/contact", json=["Taro", "taro@example.com"])

    assert response.status_code == 400
    assert set(response.json()["errors"]) == {"name", "email", "message"}


def test_malformed_json_returns_server_error(client, notifier):
    response = client.post(
        "/api/contact",
        content=b"name=Taro&email=taro@example.com",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 500
    assert response.json() == {"message": SERVER_ERROR_MESSAGE}
    assert notifier.received == []


def test_empty_body_returns_server_error(client):
    response = client.post("/api/contact", headers={"Content-Type": "application/json"})

    assert response.status_code == 500
    assert response.json() == {"message": SERVER_ERROR_MESSAGE}


def test_notifier_failure_is_logged_and_hidden(client, valid_payload, caplog):
    class BrokenNotifier:
        def notify(self, submission):
            raise RuntimeError("smtp relay at 10.0.0.5 refused connection")

    app.dependency_overrides[get_notifier] = lambda: BrokenNotifier()
    with caplog.at_level(logging.ERROR, logger="main"):
        response = client.post("/api/contact", json=valid_payload)

    assert response.status_code == 500
    assert response.json() == {"message": SERVER_ERROR_MESSAGE}
    assert "10.0.0.5" not in response.text
    assert "Failed to process contact submission" in caplog.text


def test_default_notifier_logs_submission(valid_payload, caplog):
    app.dependency_overrides.pop(get_notifier, None)

    with caplog.at_level(logging.INFO, logger="notifier"):
        response = TestClient(app).post("/api/contact", json=valid_payload)

    assert response.status_code == 200
    assert "taro@example.com" in caplog.text


def test_contact_page_renders_empty_form(client):
    response = client.get("/contact")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    body = response.text
    assert 'id="contact-form"' in body
    assert 'action="/api/contact"' in body
    assert 'id="contact-banner" role="status"' in body
    assert "送信" in body


def test_contact_page_script_uses_shared_rules(client):
    body = client.get("/contact").text

    assert '"pattern":' in body
    assert "Array.from(value).length" in body
    assert "showErrors(result.errors" in body
