"""Unit tests for the SendGrid email channel."""

from __future__ import annotations

import json
import types

import pytest

from notification_core.domain.entities import NotificationRecord
from notification_core.infrastructure import email as email_module


class DummySettings:
    sendgrid_api_key = "SG.fake"
    sendgrid_sender = "sender@example.com"


class RecordingClient:
    """Stand-in for ``SendGridAPIClient`` that remembers sent messages."""

    messages: list = []
    status_code = 202

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        RecordingClient.messages.append(message)
        return types.SimpleNamespace(status_code=self.status_code, body=None)


@pytest.fixture(autouse=True)
def _reset_client():
    RecordingClient.messages = []
    RecordingClient.status_code = 202


def _record() -> NotificationRecord:
    return NotificationRecord(
        id=7,
        user_id="U1",
        type="payment",
        title="Payment <Received>",
        message="Payment of LKR 100 & tip has been processed",
    )


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    class MissingSettings:
        sendgrid_api_key = None
        sendgrid_sender = None

    monkeypatch.setattr(email_module, "get_settings", lambda: MissingSettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)

    assert email_module.send_email("Subject", "<p>Body</p>", "user@example.com") is False
    assert RecordingClient.messages == []


def test_send_email_success(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)

    assert email_module.send_email("Subject", "<p>Body</p>", "user@example.com") is True
    assert len(RecordingClient.messages) == 1


def test_send_email_unsuccessful_status(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    RecordingClient.status_code = 500
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email("Subject", "<p>Body</p>", "user@example.com")

    assert result is False
    assert "status 500" in caplog.text


def test_send_email_logs_provider_error_details(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {"errors": [{"message": "The provided authorization grant is invalid."}]}
        ).encode()

    class FailingClient(RecordingClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email("Subject", "<p>Body</p>", "user@example.com")

    assert result is False
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_render_notification_email_escapes_html() -> None:
    rendered = email_module.render_notification_email(_record())

    assert "<h2>Payment &lt;Received&gt;</h2>" in rendered
    assert "100 &amp; tip" in rendered


@pytest.mark.anyio
async def test_send_notification_email_runs_in_worker_thread(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_send_email(subject, html_content, recipient):
        calls.append((subject, html_content, recipient))
        return True

    monkeypatch.setattr(email_module, "send_email", fake_send_email)

    assert await email_module.send_notification_email(_record(), "user@example.com") is True
    assert calls[0][0] == "Payment <Received>"
    assert calls[0][2] == "user@example.com"
