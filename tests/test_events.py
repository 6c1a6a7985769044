"""Tests for the domain event notification helpers."""

from __future__ import annotations

import pytest

from notification_core.application.use_cases.notifications import (
    NotificationCoordinator,
    notify_booking_request,
    notify_booking_status,
    notify_new_message,
    notify_payment_received,
    notify_reminder,
    notify_review_received,
)
from notification_core.application.use_cases.notifications import events as events_module

pytestmark = pytest.mark.anyio


@pytest.fixture
def coordinator(repository, orchestrator, publisher) -> NotificationCoordinator:
    return NotificationCoordinator(repository, orchestrator, publisher=publisher)


@pytest.fixture
def sent_emails(monkeypatch) -> list[tuple[int, str]]:
    sent: list[tuple[int, str]] = []

    async def fake_send(record, recipient):
        sent.append((record.id, recipient))
        return True

    monkeypatch.setattr(events_module, "send_notification_email", fake_send)
    return sent


async def test_booking_request(coordinator, gateway) -> None:
    record = await notify_booking_request(
        coordinator,
        user_id="worker-1",
        booking_id="BK1",
        service_type="Plumbing",
        device_token="tok-1",
    )

    assert record.type == "booking"
    assert record.title == "New Booking Request"
    assert record.message == "You have a new booking request for Plumbing"
    assert record.priority == "high"
    assert record.data["bookingId"] == "BK1"
    assert gateway.sent[0]["data"]["notificationId"] == str(record.id)


@pytest.mark.parametrize(
    ("status", "message"),
    [
        ("accepted", "Your booking has been accepted"),
        ("completed", "Booking completed successfully"),
        ("on_hold", "Booking status updated"),
    ],
)
async def test_booking_status_messages(coordinator, sent_emails, status, message) -> None:
    record = await notify_booking_status(
        coordinator, user_id="customer-1", booking_id="BK123", status=status
    )

    assert record.title == "Booking Update"
    assert record.message == message
    assert record.data["status"] == status
    assert sent_emails == []


async def test_booking_status_sends_email_copy_when_requested(coordinator, sent_emails) -> None:
    record = await notify_booking_status(
        coordinator,
        user_id="customer-1",
        booking_id="BK123",
        status="accepted",
        email="customer@example.com",
    )

    assert sent_emails == [(record.id, "customer@example.com")]


async def test_email_failure_is_logged_not_raised(coordinator, monkeypatch, caplog) -> None:
    async def failing_send(record, recipient):
        return False

    monkeypatch.setattr(events_module, "send_notification_email", failing_send)

    record = await notify_payment_received(
        coordinator,
        user_id="worker-1",
        payment_id="PAY1",
        amount=2500,
        email="worker@example.com",
    )

    assert record.id is not None
    assert "was not delivered" in caplog.text


async def test_new_message_truncates_preview(coordinator, sent_emails) -> None:
    text = "x" * 150

    record = await notify_new_message(
        coordinator,
        user_id="U1",
        conversation_id="C1",
        sender_id="U2",
        sender_name="Nimal",
        text=text,
    )

    assert record.title == "Message from Nimal"
    assert record.message == "x" * 100
    assert record.data == {"conversationId": "C1", "senderId": "U2", "event": "new_message"}


async def test_review_received_stringifies_rating(coordinator, sent_emails) -> None:
    record = await notify_review_received(
        coordinator,
        user_id="worker-1",
        review_id="R1",
        booking_id="BK1",
        rating=5,
        email="worker@example.com",
    )

    assert record.message == "You received a 5-star review"
    assert record.priority == "normal"
    assert record.data["rating"] == "5"
    assert sent_emails == [(record.id, "worker@example.com")]


async def test_payment_received(coordinator, sent_emails) -> None:
    record = await notify_payment_received(
        coordinator, user_id="worker-1", payment_id="PAY1", amount="1500.00"
    )

    assert record.title == "Payment Received"
    assert record.message == "Payment of LKR 1500.00 has been processed"
    assert record.data["amount"] == "1500.00"
    assert sent_emails == []


async def test_reminder_without_booking(coordinator, gateway) -> None:
    record = await notify_reminder(
        coordinator, user_id="U1", message="Your appointment is tomorrow"
    )

    assert record.type == "reminder"
    assert record.message == "Your appointment is tomorrow"
    assert "bookingId" not in record.data
    assert gateway.calls == []
