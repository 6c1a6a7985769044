"""Domain entity representing a persisted user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

NOTIFICATION_TYPE_BOOKING = "booking"
NOTIFICATION_TYPE_BOOKING_STATUS = "booking_status"
NOTIFICATION_TYPE_MESSAGE = "message"
NOTIFICATION_TYPE_REVIEW = "review"
NOTIFICATION_TYPE_PAYMENT = "payment"
NOTIFICATION_TYPE_REMINDER = "reminder"
NOTIFICATION_TYPE_CUSTOM = "custom"

NOTIFICATION_TYPES: tuple[str, ...] = (
    NOTIFICATION_TYPE_BOOKING,
    NOTIFICATION_TYPE_BOOKING_STATUS,
    NOTIFICATION_TYPE_MESSAGE,
    NOTIFICATION_TYPE_REVIEW,
    NOTIFICATION_TYPE_PAYMENT,
    NOTIFICATION_TYPE_REMINDER,
    NOTIFICATION_TYPE_CUSTOM,
)

PRIORITY_NORMAL = "normal"
PRIORITY_HIGH = "high"

NOTIFICATION_PRIORITIES: tuple[str, ...] = (PRIORITY_NORMAL, PRIORITY_HIGH)


@dataclass
class NotificationRecord:
    """In-app notification history entry owned by the record store."""

    id: int | None
    user_id: str
    type: str
    title: str
    message: str
    data: dict[str, str] = field(default_factory=dict)
    priority: str = PRIORITY_NORMAL
    read: bool = False
    image_url: str | None = None
    created_at: datetime | None = None
    read_at: datetime | None = None
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` when the record has an expiry that is already past."""

        return self.expires_at is not None and self.expires_at <= now


__all__ = [
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_BOOKING",
    "NOTIFICATION_TYPE_BOOKING_STATUS",
    "NOTIFICATION_TYPE_CUSTOM",
    "NOTIFICATION_TYPE_MESSAGE",
    "NOTIFICATION_TYPE_PAYMENT",
    "NOTIFICATION_TYPE_REMINDER",
    "NOTIFICATION_TYPE_REVIEW",
    "NotificationRecord",
    "PRIORITY_HIGH",
    "PRIORITY_NORMAL",
]
