"""Public helpers for emitting domain notifications."""

from .coordinator import NotificationCoordinator, get_notification_coordinator
from .events import (
    notify_booking_request,
    notify_booking_status,
    notify_new_message,
    notify_payment_received,
    notify_reminder,
    notify_review_received,
)

__all__ = [
    "NotificationCoordinator",
    "get_notification_coordinator",
    "notify_booking_request",
    "notify_booking_status",
    "notify_new_message",
    "notify_review_received",
    "notify_payment_received",
    "notify_reminder",
]
