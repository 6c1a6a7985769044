"""Couple push delivery to the durable notification record."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from notification_core.application.push import (
    DeliveryOrchestrator,
    TopicSubscriptionManager,
)
from notification_core.domain.entities import (
    DeliveryResult,
    NotificationIntent,
    NotificationRecord,
    SubscriptionResult,
)
from notification_core.domain.errors import GatewayError, InvalidTargetError
from notification_core.infrastructure.notifications import (
    TokenInvalidationPublisher,
    token_invalidation_publisher,
)
from notification_core.infrastructure.push import get_push_gateway
from notification_core.infrastructure.repositories import NotificationRepository
from notification_core.utils import now_in_app_timezone
from notification_core.utils.tokens import mask_token

logger = logging.getLogger(__name__)


class NotificationCoordinator:
    """Persist every accepted intent and push it to the user's device.

    The record is written before any gateway call and is never rolled back by
    a push failure. Push errors are logged and absorbed; only
    :class:`StoreWriteError` escapes :meth:`notify_user`.
    """

    def __init__(
        self,
        store: NotificationRepository,
        orchestrator: DeliveryOrchestrator,
        *,
        topics: TopicSubscriptionManager | None = None,
        publisher: TokenInvalidationPublisher | None = None,
    ) -> None:
        self._store = store
        self._orchestrator = orchestrator
        self._topics = topics or TopicSubscriptionManager(orchestrator.gateway)
        self._publisher = publisher or token_invalidation_publisher

    @property
    def store(self) -> NotificationRepository:
        return self._store

    async def notify_user(
        self,
        user_id: str,
        intent: NotificationIntent,
        device_token: str | None = None,
    ) -> NotificationRecord:
        record = self._store.create(
            NotificationRecord(
                id=None,
                user_id=user_id,
                type=intent.type,
                title=intent.title,
                message=intent.body,
                data=dict(intent.data),
                priority=intent.priority,
                image_url=intent.image_url,
                created_at=now_in_app_timezone(),
                expires_at=intent.expires_at,
            )
        )

        if not device_token:
            logger.debug("User %s has no device token; push skipped", user_id)
            return record

        try:
            result = await self._orchestrator.dispatch_single(
                intent.with_data(notificationId=record.id), device_token
            )
        except (GatewayError, InvalidTargetError) as exc:
            logger.warning(
                "Push delivery of notification %s to %s failed: %s",
                record.id,
                mask_token(device_token),
                exc,
            )
            return record
        except Exception:
            logger.exception(
                "Unexpected error while pushing notification %s to %s",
                record.id,
                mask_token(device_token),
            )
            return record

        if result.invalid_tokens:
            await self._publisher.publish(user_id, result.invalid_tokens)
        if result.succeeded:
            logger.info(
                "Notification %s pushed to user %s (message %s)",
                record.id,
                user_id,
                result.message_id,
            )
        else:
            logger.warning(
                "Push delivery of notification %s to user %s was rejected (%s)",
                record.id,
                user_id,
                result.error,
            )
        return record

    async def dispatch_multicast(
        self, intent: NotificationIntent, tokens: Iterable[str | None]
    ) -> DeliveryResult:
        """Send ``intent`` to many devices without persisting a record."""

        return await self._orchestrator.dispatch_multicast(intent, tokens)

    async def dispatch_topic(self, intent: NotificationIntent, topic: str) -> DeliveryResult:
        return await self._orchestrator.dispatch_topic(intent, topic)

    async def subscribe_topic(self, tokens: Iterable[str | None], topic: str) -> SubscriptionResult:
        return await self._topics.subscribe(tokens, topic)

    async def unsubscribe_topic(
        self, tokens: Iterable[str | None], topic: str
    ) -> SubscriptionResult:
        return await self._topics.unsubscribe(tokens, topic)


def get_notification_coordinator(session: Session) -> NotificationCoordinator:
    """Build a coordinator bound to ``session`` and the configured gateway."""

    orchestrator = DeliveryOrchestrator.from_settings(get_push_gateway())
    return NotificationCoordinator(NotificationRepository(session), orchestrator)


__all__ = ["NotificationCoordinator", "get_notification_coordinator"]
