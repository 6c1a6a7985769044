"""Delivery orchestrator: turns an intent and a target into gateway calls."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import TypeVar

import anyio

from notification_core.config import Settings, get_settings
from notification_core.domain.entities import (
    DeliveryResult,
    DeliveryTarget,
    MulticastTarget,
    NotificationIntent,
    PushNotification,
    SingleTarget,
    TopicTarget,
)
from notification_core.domain.errors import (
    ERROR_TRANSPORT_TIMEOUT,
    GatewayError,
    InvalidTargetError,
    PermanentTokenError,
    TransientGatewayError,
)
from notification_core.infrastructure.push import PushGateway
from notification_core.utils.retry import (
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    retry_with_backoff,
)
from notification_core.utils.tokens import chunked, mask_token, normalize_tokens, normalize_topic

from .classification import Classifier, ErrorKind, classify

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 500


class DeliveryOrchestrator:
    """Select the gateway call shape for a target and interpret its outcome.

    Every gateway call goes through :func:`retry_with_backoff`. Failures
    classified transient are retried; failures classified permanent are
    surfaced after a single attempt. The orchestrator holds no mutable state,
    so one instance can serve any number of concurrent dispatches.
    """

    def __init__(
        self,
        gateway: PushGateway,
        *,
        classifier: Classifier = classify,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._gateway = gateway
        self._classifier = classifier
        self._max_attempts = max_attempts
        self._initial_delay = initial_delay
        self._batch_size = batch_size

    @classmethod
    def from_settings(
        cls, gateway: PushGateway, settings: Settings | None = None
    ) -> "DeliveryOrchestrator":
        settings = settings or get_settings()
        return cls(
            gateway,
            max_attempts=settings.push_retry_max_attempts,
            initial_delay=settings.push_retry_initial_delay,
            batch_size=settings.push_multicast_batch_size,
        )

    @property
    def gateway(self) -> PushGateway:
        return self._gateway

    async def dispatch(self, intent: NotificationIntent, target: DeliveryTarget) -> DeliveryResult:
        """Deliver ``intent`` to ``target``.

        Raises :class:`InvalidTargetError` when there is nobody to send to and
        :class:`TransientGatewayError` once the retry budget is exhausted. Token
        rejections and partial multicast failures are reported in the result.
        """

        if isinstance(target, SingleTarget):
            return await self._dispatch_single(intent, target.token)
        if isinstance(target, MulticastTarget):
            return await self._dispatch_multicast(intent, target.tokens)
        if isinstance(target, TopicTarget):
            return await self._dispatch_topic(intent, target.topic)
        raise InvalidTargetError(f"Unsupported delivery target: {target!r}")

    async def dispatch_single(self, intent: NotificationIntent, token: str | None) -> DeliveryResult:
        return await self.dispatch(intent, SingleTarget(token))

    async def dispatch_multicast(
        self, intent: NotificationIntent, tokens: Iterable[str | None]
    ) -> DeliveryResult:
        return await self.dispatch(intent, MulticastTarget.of(tokens))

    async def dispatch_topic(self, intent: NotificationIntent, topic: str | None) -> DeliveryResult:
        return await self.dispatch(intent, TopicTarget(topic))

    async def _dispatch_single(self, intent: NotificationIntent, token: str | None) -> DeliveryResult:
        tokens = normalize_tokens(token)
        if not tokens:
            raise InvalidTargetError("A device token is required")
        token = tokens[0]
        notification = _push_notification(intent)
        data = dict(intent.data)

        try:
            message_id = await self._call(
                lambda: self._gateway.send_single(token, notification, data)
            )
        except PermanentTokenError as exc:
            logger.warning(
                "Device token %s rejected permanently (%s)", mask_token(token), exc.code
            )
            return DeliveryResult(
                succeeded=False,
                failure_count=1,
                invalid_tokens=frozenset({token}),
                error=exc.code,
            )

        return DeliveryResult(succeeded=True, message_id=message_id, success_count=1)

    async def _dispatch_multicast(
        self, intent: NotificationIntent, raw_tokens: Sequence[str | None]
    ) -> DeliveryResult:
        tokens = normalize_tokens(raw_tokens)
        if not tokens:
            raise InvalidTargetError("No valid device tokens provided")
        notification = _push_notification(intent)
        data = dict(intent.data)

        success_count = 0
        failure_count = 0
        invalid_tokens: set[str] = set()
        answered_batches = 0
        last_error: GatewayError | None = None

        for batch in chunked(tokens, self._batch_size):
            try:
                outcomes = await self._call(
                    lambda batch=batch: self._gateway.send_multicast(batch, notification, data)
                )
            except GatewayError as exc:
                # Whole batch failed; no individual token is to blame.
                logger.warning(
                    "Multicast batch of %d token(s) failed (%s)", len(batch), exc.code
                )
                failure_count += len(batch)
                last_error = exc
                continue

            answered_batches += 1
            for outcome in outcomes:
                if outcome.success:
                    success_count += 1
                    continue
                failure_count += 1
                if self._classifier(outcome.error_code) is ErrorKind.PERMANENT:
                    invalid_tokens.add(outcome.token)

        if answered_batches == 0 and isinstance(last_error, TransientGatewayError):
            raise last_error

        if invalid_tokens:
            logger.warning("%d device token(s) flagged invalid", len(invalid_tokens))
        logger.info(
            "Multicast delivery finished: %d successful, %d failed", success_count, failure_count
        )
        return DeliveryResult(
            succeeded=success_count > 0,
            success_count=success_count,
            failure_count=failure_count,
            invalid_tokens=frozenset(invalid_tokens),
            error=last_error.code if last_error is not None else None,
        )

    async def _dispatch_topic(self, intent: NotificationIntent, raw_topic: str | None) -> DeliveryResult:
        topic = normalize_topic(raw_topic)
        if topic is None:
            raise InvalidTargetError(f"Invalid topic name: {raw_topic!r}")
        notification = _push_notification(intent)
        data = dict(intent.data)

        try:
            message_id = await self._call(
                lambda: self._gateway.send_topic(topic, notification, data)
            )
        except PermanentTokenError as exc:
            logger.warning("Topic %s rejected the notification (%s)", topic, exc.code)
            return DeliveryResult(succeeded=False, error=exc.code)

        return DeliveryResult(succeeded=True, message_id=message_id)

    async def _call(self, operation: Callable[[], Awaitable[T]]) -> T:
        async def attempt() -> T:
            try:
                return await operation()
            except (TransientGatewayError, PermanentTokenError):
                raise
            except GatewayError as exc:
                raise self._classify_error(exc) from exc

        return await retry_with_backoff(
            attempt,
            max_attempts=self._max_attempts,
            initial_delay=self._initial_delay,
            retry_on=TransientGatewayError,
        )

    def _classify_error(self, exc: GatewayError) -> GatewayError:
        if self._classifier(exc.code) is ErrorKind.PERMANENT:
            return PermanentTokenError(exc.code, str(exc), token=exc.token)
        return TransientGatewayError(exc.code, str(exc), token=exc.token)


async def dispatch_with_timeout(
    orchestrator: DeliveryOrchestrator,
    intent: NotificationIntent,
    target: DeliveryTarget,
    *,
    timeout: float,
) -> DeliveryResult:
    """Race :meth:`DeliveryOrchestrator.dispatch` against a deadline.

    An expired deadline is reported as a transient failure; no token is
    flagged since no gateway answer was received.
    """

    with anyio.move_on_after(timeout):
        return await orchestrator.dispatch(intent, target)
    logger.warning("Dispatch cancelled after %.2fs deadline", timeout)
    return DeliveryResult(succeeded=False, error=ERROR_TRANSPORT_TIMEOUT)


def _push_notification(intent: NotificationIntent) -> PushNotification:
    return PushNotification(
        title=intent.title,
        body=intent.body,
        image_url=intent.image_url,
        channel_id=intent.type,
        priority=intent.priority,
    )


__all__ = ["DEFAULT_BATCH_SIZE", "DeliveryOrchestrator", "dispatch_with_timeout"]
