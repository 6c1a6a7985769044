"""Delete notification records whose expiry date has passed."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime

from notification_core.domain.errors import StoreWriteError
from notification_core.infrastructure.database import SessionLocal, initialize_database
from notification_core.infrastructure.repositories import NotificationRepository


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Purge expired notification records from the database.",
    )
    parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        default=None,
        help="ISO timestamp used as the expiry cutoff (default: now)",
    )
    return parser.parse_args()


def main() -> None:
    """Remove expired records and report how many were deleted."""

    logging.basicConfig(level=logging.INFO)
    args = parse_args()

    initialize_database()

    session = SessionLocal()
    try:
        deleted = NotificationRepository(session).delete_expired(args.as_of)
    except StoreWriteError as exc:
        raise SystemExit(f"Could not purge expired notifications: {exc}") from exc
    finally:
        session.close()

    print(f"Deleted {deleted} expired notification(s)")


if __name__ == "__main__":
    main()
