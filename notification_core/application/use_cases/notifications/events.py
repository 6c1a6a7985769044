"""Helpers that turn marketplace domain events into user notifications."""

from __future__ import annotations

import logging
from decimal import Decimal

from notification_core.domain.entities import (
    NOTIFICATION_TYPE_BOOKING,
    NOTIFICATION_TYPE_BOOKING_STATUS,
    NOTIFICATION_TYPE_MESSAGE,
    NOTIFICATION_TYPE_PAYMENT,
    NOTIFICATION_TYPE_REMINDER,
    NOTIFICATION_TYPE_REVIEW,
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    NotificationIntent,
    NotificationRecord,
)
from notification_core.infrastructure.email import send_notification_email

from .coordinator import NotificationCoordinator

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LENGTH = 100

BOOKING_STATUS_MESSAGES: dict[str, str] = {
    "accepted": "Your booking has been accepted",
    "rejected": "Your booking has been declined",
    "cancelled": "Booking has been cancelled",
    "completed": "Booking completed successfully",
    "in_progress": "Work is now in progress",
}
DEFAULT_BOOKING_STATUS_MESSAGE = "Booking status updated"


async def notify_booking_request(
    coordinator: NotificationCoordinator,
    *,
    user_id: str,
    booking_id: str,
    service_type: str,
    device_token: str | None = None,
) -> NotificationRecord:
    """Tell a worker that a customer requested a booking."""

    intent = NotificationIntent(
        type=NOTIFICATION_TYPE_BOOKING,
        title="New Booking Request",
        body=f"You have a new booking request for {service_type}",
        data={"bookingId": booking_id, "event": "booking_request"},
        priority=PRIORITY_HIGH,
    )
    return await coordinator.notify_user(user_id, intent, device_token)


async def notify_booking_status(
    coordinator: NotificationCoordinator,
    *,
    user_id: str,
    booking_id: str,
    status: str,
    device_token: str | None = None,
    email: str | None = None,
) -> NotificationRecord:
    """Tell a customer that the status of their booking changed."""

    intent = NotificationIntent(
        type=NOTIFICATION_TYPE_BOOKING_STATUS,
        title="Booking Update",
        body=BOOKING_STATUS_MESSAGES.get(status, DEFAULT_BOOKING_STATUS_MESSAGE),
        data={"bookingId": booking_id, "status": status, "event": "booking_status"},
        priority=PRIORITY_HIGH,
    )
    record = await coordinator.notify_user(user_id, intent, device_token)
    await _email_copy(record, email)
    return record


async def notify_new_message(
    coordinator: NotificationCoordinator,
    *,
    user_id: str,
    conversation_id: str,
    sender_id: str,
    sender_name: str,
    text: str,
    device_token: str | None = None,
) -> NotificationRecord:
    intent = NotificationIntent(
        type=NOTIFICATION_TYPE_MESSAGE,
        title=f"Message from {sender_name}",
        body=text[:MESSAGE_PREVIEW_LENGTH],
        data={
            "conversationId": conversation_id,
            "senderId": sender_id,
            "event": "new_message",
        },
        priority=PRIORITY_HIGH,
    )
    return await coordinator.notify_user(user_id, intent, device_token)


async def notify_review_received(
    coordinator: NotificationCoordinator,
    *,
    user_id: str,
    review_id: str,
    booking_id: str,
    rating: int,
    device_token: str | None = None,
    email: str | None = None,
) -> NotificationRecord:
    intent = NotificationIntent(
        type=NOTIFICATION_TYPE_REVIEW,
        title="New Review",
        body=f"You received a {rating}-star review",
        data={
            "reviewId": review_id,
            "bookingId": booking_id,
            "rating": rating,
            "event": "new_review",
        },
        priority=PRIORITY_NORMAL,
    )
    record = await coordinator.notify_user(user_id, intent, device_token)
    await _email_copy(record, email)
    return record


async def notify_payment_received(
    coordinator: NotificationCoordinator,
    *,
    user_id: str,
    payment_id: str,
    amount: Decimal | float | int | str,
    device_token: str | None = None,
    email: str | None = None,
) -> NotificationRecord:
    intent = NotificationIntent(
        type=NOTIFICATION_TYPE_PAYMENT,
        title="Payment Received",
        body=f"Payment of LKR {amount} has been processed",
        data={"paymentId": payment_id, "amount": amount, "event": "payment_received"},
        priority=PRIORITY_HIGH,
    )
    record = await coordinator.notify_user(user_id, intent, device_token)
    await _email_copy(record, email)
    return record


async def notify_reminder(
    coordinator: NotificationCoordinator,
    *,
    user_id: str,
    message: str,
    booking_id: str | None = None,
    device_token: str | None = None,
) -> NotificationRecord:
    intent = NotificationIntent(
        type=NOTIFICATION_TYPE_REMINDER,
        title="Reminder",
        body=message,
        data={"bookingId": booking_id, "event": "reminder"},
        priority=PRIORITY_NORMAL,
    )
    return await coordinator.notify_user(user_id, intent, device_token)


async def _email_copy(record: NotificationRecord, email: str | None) -> None:
    if not email:
        return
    if not await send_notification_email(record, email):
        logger.warning("Email copy of notification %s was not delivered", record.id)


__all__ = [
    "BOOKING_STATUS_MESSAGES",
    "DEFAULT_BOOKING_STATUS_MESSAGE",
    "MESSAGE_PREVIEW_LENGTH",
    "notify_booking_request",
    "notify_booking_status",
    "notify_new_message",
    "notify_payment_received",
    "notify_reminder",
    "notify_review_received",
]
