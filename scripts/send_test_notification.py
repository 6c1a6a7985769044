"""Send a test push notification to one device token."""

from __future__ import annotations

import argparse
import logging

import anyio

from notification_core.application.push import DeliveryOrchestrator, dispatch_with_timeout
from notification_core.domain.entities import (
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_TYPE_CUSTOM,
    NOTIFICATION_TYPES,
    PRIORITY_NORMAL,
    NotificationIntent,
    SingleTarget,
)
from notification_core.domain.errors import NotificationError
from notification_core.infrastructure.push import get_push_gateway


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the test notification."""

    parser = argparse.ArgumentParser(
        description="Send a test push notification through the configured gateway.",
    )
    parser.add_argument("token", help="Device registration token to notify")
    parser.add_argument(
        "--title",
        default="Test Notification",
        help="Notification title (default: Test Notification)",
    )
    parser.add_argument(
        "--body",
        default="This is a test notification",
        help="Notification body (default: This is a test notification)",
    )
    parser.add_argument(
        "--type",
        dest="notification_type",
        default=NOTIFICATION_TYPE_CUSTOM,
        choices=NOTIFICATION_TYPES,
        help="Notification type, also used as the Android channel (default: custom)",
    )
    parser.add_argument(
        "--priority",
        default=PRIORITY_NORMAL,
        choices=NOTIFICATION_PRIORITIES,
        help="Delivery priority (default: normal)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Seconds to wait for the gateway before giving up (default: 30)",
    )
    return parser.parse_args()


async def _send(args: argparse.Namespace) -> None:
    orchestrator = DeliveryOrchestrator.from_settings(get_push_gateway())
    intent = NotificationIntent(
        type=args.notification_type,
        title=args.title,
        body=args.body,
        data={"test": "true"},
        priority=args.priority,
    )
    result = await dispatch_with_timeout(
        orchestrator, intent, SingleTarget(args.token), timeout=args.timeout
    )
    if not result.succeeded:
        raise SystemExit(f"Push notification was not delivered: {result.error}")
    print(f"Push notification sent:\n  Message ID: {result.message_id}")


def main() -> None:
    """Send a test notification using the provided command line arguments."""

    logging.basicConfig(level=logging.INFO)
    args = parse_args()
    try:
        anyio.run(_send, args)
    except NotificationError as exc:
        raise SystemExit(f"Push notification failed: {exc}") from exc


if __name__ == "__main__":
    main()
