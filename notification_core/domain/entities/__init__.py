"""Domain entities exposed by the notification core."""

from .delivery import (
    DeliveryResult,
    DeliveryTarget,
    MulticastTarget,
    PushNotification,
    SingleTarget,
    SubscriptionResult,
    TokenOutcome,
    TopicTarget,
)
from .intent import NotificationIntent, stringify_data
from .notification import (
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_TYPES,
    NOTIFICATION_TYPE_BOOKING,
    NOTIFICATION_TYPE_BOOKING_STATUS,
    NOTIFICATION_TYPE_CUSTOM,
    NOTIFICATION_TYPE_MESSAGE,
    NOTIFICATION_TYPE_PAYMENT,
    NOTIFICATION_TYPE_REMINDER,
    NOTIFICATION_TYPE_REVIEW,
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    NotificationRecord,
)

__all__ = [
    "DeliveryResult",
    "DeliveryTarget",
    "MulticastTarget",
    "PushNotification",
    "SingleTarget",
    "SubscriptionResult",
    "TokenOutcome",
    "TopicTarget",
    "NotificationIntent",
    "stringify_data",
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_BOOKING",
    "NOTIFICATION_TYPE_BOOKING_STATUS",
    "NOTIFICATION_TYPE_CUSTOM",
    "NOTIFICATION_TYPE_MESSAGE",
    "NOTIFICATION_TYPE_PAYMENT",
    "NOTIFICATION_TYPE_REMINDER",
    "NOTIFICATION_TYPE_REVIEW",
    "PRIORITY_HIGH",
    "PRIORITY_NORMAL",
    "NotificationRecord",
]
