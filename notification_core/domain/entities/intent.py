"""Caller request to notify one user about one domain event."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from .notification import NOTIFICATION_PRIORITIES, NOTIFICATION_TYPES, PRIORITY_NORMAL


@dataclass(frozen=True)
class NotificationIntent:
    """Ephemeral input consumed once by the delivery pipeline.

    ``data`` is an opaque string mapping forwarded to the client application;
    non-string values are coerced with ``str`` on construction.
    """

    type: str
    title: str
    body: str
    data: Mapping[str, str] = field(default_factory=dict)
    priority: str = PRIORITY_NORMAL
    image_url: str | None = None
    expires_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unsupported notification type: {self.type!r}")
        if self.priority not in NOTIFICATION_PRIORITIES:
            raise ValueError(f"Unsupported notification priority: {self.priority!r}")
        object.__setattr__(self, "data", stringify_data(self.data))

    def with_data(self, **extra: Any) -> "NotificationIntent":
        """Return a copy whose data payload also contains ``extra``."""

        merged = {**self.data, **stringify_data(extra)}
        return NotificationIntent(
            type=self.type,
            title=self.title,
            body=self.body,
            data=merged,
            priority=self.priority,
            image_url=self.image_url,
            expires_at=self.expires_at,
        )


def stringify_data(data: Mapping[str, Any] | None) -> dict[str, str]:
    """Drop ``None`` values and coerce the rest to strings."""

    if not data:
        return {}
    return {str(key): str(value) for key, value in data.items() if value is not None}


__all__ = ["NotificationIntent", "stringify_data"]
