"""Value objects exchanged with push gateways and returned to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union

from .notification import PRIORITY_NORMAL


@dataclass(frozen=True)
class PushNotification:
    """Visible part of a push message."""

    title: str
    body: str
    image_url: str | None = None
    channel_id: str = "default"
    priority: str = PRIORITY_NORMAL


@dataclass(frozen=True)
class SingleTarget:
    token: str | None


@dataclass(frozen=True)
class MulticastTarget:
    tokens: tuple[str | None, ...]

    @classmethod
    def of(cls, tokens: Iterable[str | None]) -> "MulticastTarget":
        return cls(tuple(tokens))


@dataclass(frozen=True)
class TopicTarget:
    topic: str | None


DeliveryTarget = Union[SingleTarget, MulticastTarget, TopicTarget]


@dataclass(frozen=True)
class TokenOutcome:
    """Gateway verdict for one token of a multicast batch."""

    token: str
    success: bool
    message_id: str | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one orchestrator invocation; never persisted."""

    succeeded: bool
    message_id: str | None = None
    success_count: int = 0
    failure_count: int = 0
    invalid_tokens: frozenset[str] = field(default_factory=frozenset)
    error: str | None = None


@dataclass(frozen=True)
class SubscriptionResult:
    """Aggregate counts returned by topic subscribe/unsubscribe calls."""

    success_count: int = 0
    failure_count: int = 0

    def __add__(self, other: "SubscriptionResult") -> "SubscriptionResult":
        return SubscriptionResult(
            success_count=self.success_count + other.success_count,
            failure_count=self.failure_count + other.failure_count,
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
]
