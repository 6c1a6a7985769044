"""Aggregate application use cases."""

from .notifications import NotificationCoordinator, get_notification_coordinator

__all__ = ["NotificationCoordinator", "get_notification_coordinator"]
