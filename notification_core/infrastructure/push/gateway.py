"""Push gateway port: the capability set expected from a push provider."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Sequence

from notification_core.domain.entities import PushNotification, SubscriptionResult, TokenOutcome


class PushGateway(ABC):
    """Abstract interface implemented by push provider adapters.

    Adapters perform exactly one provider call per method and persist nothing.
    Provider failures are raised as
    :class:`~notification_core.domain.errors.GatewayError` carrying one of the
    codes from :mod:`notification_core.domain.errors`;
    per-token multicast failures are reported in the returned outcomes instead.
    """

    @abstractmethod
    async def send_single(
        self,
        token: str,
        notification: PushNotification,
        data: Mapping[str, str],
    ) -> str:
        """Send to one device and return the provider message id."""

    @abstractmethod
    async def send_multicast(
        self,
        tokens: Sequence[str],
        notification: PushNotification,
        data: Mapping[str, str],
    ) -> list[TokenOutcome]:
        """Send to several devices in one call, one outcome per token in order."""

    @abstractmethod
    async def send_topic(
        self,
        topic: str,
        notification: PushNotification,
        data: Mapping[str, str],
    ) -> str:
        """Broadcast to every device subscribed to ``topic``."""

    @abstractmethod
    async def subscribe(self, tokens: Sequence[str], topic: str) -> SubscriptionResult:
        """Subscribe ``tokens`` to ``topic``."""

    @abstractmethod
    async def unsubscribe(self, tokens: Sequence[str], topic: str) -> SubscriptionResult:
        """Remove ``tokens`` from ``topic``."""


__all__ = ["PushGateway"]
