"""Topic subscription management for group notifications."""

from __future__ import annotations

import logging
from typing import Iterable

from notification_core.domain.entities import SubscriptionResult
from notification_core.domain.errors import InvalidTargetError
from notification_core.infrastructure.push import PushGateway
from notification_core.utils.tokens import chunked, normalize_tokens, normalize_topic

logger = logging.getLogger(__name__)

# Provider limit for a single topic management request.
MAX_TOKENS_PER_REQUEST = 1000


class TopicSubscriptionManager:
    """Normalize tokens and forward topic membership changes to the gateway.

    No membership state is kept here; the gateway is the source of truth and
    repeated subscribe/unsubscribe calls are idempotent on its side.
    """

    def __init__(self, gateway: PushGateway) -> None:
        self._gateway = gateway

    async def subscribe(self, tokens: Iterable[str | None] | str | None, topic: str) -> SubscriptionResult:
        """Subscribe one token or a collection of tokens to ``topic``."""

        normalized_topic, normalized_tokens = self._prepare(tokens, topic)
        result = SubscriptionResult()
        for batch in chunked(normalized_tokens, MAX_TOKENS_PER_REQUEST):
            result += await self._gateway.subscribe(batch, normalized_topic)
        logger.info(
            "Subscribed to topic %s: %d successful, %d failed",
            normalized_topic,
            result.success_count,
            result.failure_count,
        )
        return result

    async def unsubscribe(self, tokens: Iterable[str | None] | str | None, topic: str) -> SubscriptionResult:
        """Remove one token or a collection of tokens from ``topic``."""

        normalized_topic, normalized_tokens = self._prepare(tokens, topic)
        result = SubscriptionResult()
        for batch in chunked(normalized_tokens, MAX_TOKENS_PER_REQUEST):
            result += await self._gateway.unsubscribe(batch, normalized_topic)
        logger.info(
            "Unsubscribed from topic %s: %d successful, %d failed",
            normalized_topic,
            result.success_count,
            result.failure_count,
        )
        return result

    @staticmethod
    def _prepare(tokens: Iterable[str | None] | str | None, topic: str) -> tuple[str, list[str]]:
        normalized_topic = normalize_topic(topic)
        if normalized_topic is None:
            raise InvalidTargetError(f"Invalid topic name: {topic!r}")
        normalized_tokens = normalize_tokens(tokens)
        if not normalized_tokens:
            raise InvalidTargetError("At least one device token is required")
        return normalized_topic, normalized_tokens


__all__ = ["MAX_TOKENS_PER_REQUEST", "TopicSubscriptionManager"]
