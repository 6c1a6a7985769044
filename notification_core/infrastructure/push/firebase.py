"""Firebase Cloud Messaging implementation of the push gateway."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Mapping, Sequence, TypeVar

from anyio import to_thread
import firebase_admin
from firebase_admin import credentials, exceptions as firebase_exceptions, messaging

from notification_core.domain.entities import (
    PRIORITY_HIGH,
    PushNotification,
    SubscriptionResult,
    TokenOutcome,
)
from notification_core.domain.errors import (
    ERROR_INVALID_REGISTRATION,
    ERROR_NOT_REGISTERED,
    ERROR_RATE_LIMITED,
    ERROR_TRANSPORT_TIMEOUT,
    ERROR_UNKNOWN,
    GatewayError,
)
from notification_core.utils.tokens import mask_token

from .gateway import PushGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")

FIREBASE_APP_NAME = "notification-core"
DEFAULT_CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"


def error_code_for(exc: BaseException | None) -> str:
    """Translate a Firebase Admin SDK exception into a provider error code."""

    if exc is None:
        return ERROR_UNKNOWN
    if isinstance(exc, messaging.UnregisteredError):
        return ERROR_NOT_REGISTERED
    if isinstance(exc, messaging.SenderIdMismatchError):
        return ERROR_INVALID_REGISTRATION
    if isinstance(exc, firebase_exceptions.InvalidArgumentError):
        # INVALID_ARGUMENT also covers malformed messages; only a named token is dead.
        if "registration token" in str(exc).lower():
            return ERROR_INVALID_REGISTRATION
        return ERROR_UNKNOWN
    if isinstance(exc, (messaging.QuotaExceededError, firebase_exceptions.ResourceExhaustedError)):
        return ERROR_RATE_LIMITED
    if isinstance(
        exc,
        (firebase_exceptions.DeadlineExceededError, firebase_exceptions.UnavailableError),
    ):
        return ERROR_TRANSPORT_TIMEOUT
    return ERROR_UNKNOWN


class FirebasePushGateway(PushGateway):
    """Send push notifications through the Firebase Admin SDK.

    The SDK is blocking, so every provider call runs in a worker thread and
    only the calling task is suspended. The Firebase app is initialized lazily
    on first use with the service account file when one is configured and
    with application default credentials otherwise.
    """

    def __init__(
        self,
        *,
        credentials_path: str | None = None,
        project_id: str | None = None,
        click_action: str = DEFAULT_CLICK_ACTION,
        app_name: str = FIREBASE_APP_NAME,
    ) -> None:
        self._credentials_path = credentials_path
        self._project_id = project_id
        self._click_action = click_action
        self._app_name = app_name
        self._app: firebase_admin.App | None = None

    async def send_single(
        self,
        token: str,
        notification: PushNotification,
        data: Mapping[str, str],
    ) -> str:
        message = messaging.Message(
            token=token,
            notification=self._build_notification(notification),
            data=self._build_data(data),
            android=self._build_android_config(notification),
            apns=self._build_apns_config(notification),
        )
        message_id = await self._call(lambda app: messaging.send(message, app=app), token=token)
        logger.info("Notification sent to %s: %s", mask_token(token), message_id)
        return message_id

    async def send_multicast(
        self,
        tokens: Sequence[str],
        notification: PushNotification,
        data: Mapping[str, str],
    ) -> list[TokenOutcome]:
        message = messaging.MulticastMessage(
            tokens=list(tokens),
            notification=self._build_notification(notification),
            data=self._build_data(data),
            android=self._build_android_config(notification),
            apns=self._build_apns_config(notification),
        )
        response = await self._call(
            lambda app: messaging.send_each_for_multicast(message, app=app)
        )
        logger.info(
            "Batch notification sent: %s successful, %s failed",
            response.success_count,
            response.failure_count,
        )

        outcomes: list[TokenOutcome] = []
        responses = list(response.responses)
        for index, token in enumerate(tokens):
            item = responses[index] if index < len(responses) else None
            if item is None:
                outcomes.append(TokenOutcome(token=token, success=False, error_code=ERROR_UNKNOWN))
            elif item.success:
                outcomes.append(TokenOutcome(token=token, success=True, message_id=item.message_id))
            else:
                outcomes.append(
                    TokenOutcome(
                        token=token,
                        success=False,
                        error_code=error_code_for(item.exception),
                    )
                )
        return outcomes

    async def send_topic(
        self,
        topic: str,
        notification: PushNotification,
        data: Mapping[str, str],
    ) -> str:
        message = messaging.Message(
            topic=topic,
            notification=self._build_notification(notification),
            data=self._build_data(data),
            android=self._build_android_config(notification),
        )
        message_id = await self._call(lambda app: messaging.send(message, app=app))
        logger.info("Topic notification sent to %s: %s", topic, message_id)
        return message_id

    async def subscribe(self, tokens: Sequence[str], topic: str) -> SubscriptionResult:
        response = await self._call(
            lambda app: messaging.subscribe_to_topic(list(tokens), topic, app=app)
        )
        logger.info(
            "Subscribed to topic %s: %s successful, %s failed",
            topic,
            response.success_count,
            response.failure_count,
        )
        return SubscriptionResult(
            success_count=response.success_count, failure_count=response.failure_count
        )

    async def unsubscribe(self, tokens: Sequence[str], topic: str) -> SubscriptionResult:
        response = await self._call(
            lambda app: messaging.unsubscribe_from_topic(list(tokens), topic, app=app)
        )
        logger.info(
            "Unsubscribed from topic %s: %s successful, %s failed",
            topic,
            response.success_count,
            response.failure_count,
        )
        return SubscriptionResult(
            success_count=response.success_count, failure_count=response.failure_count
        )

    async def _call(self, func: Callable[[firebase_admin.App], T], *, token: str | None = None) -> T:
        try:
            app = self._get_app()
            return await to_thread.run_sync(func, app)
        except firebase_exceptions.FirebaseError as exc:
            code = error_code_for(exc)
            logger.warning("Firebase messaging call failed (%s): %s", code, exc)
            raise GatewayError(code, str(exc), token=token) from exc
        except Exception as exc:
            logger.exception("Firebase messaging call failed before reaching the provider")
            raise GatewayError(ERROR_UNKNOWN, str(exc), token=token) from exc

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app(self._app_name)
        except ValueError:
            if self._credentials_path:
                credential = credentials.Certificate(self._credentials_path)
            else:
                logger.warning(
                    "FIREBASE_CREDENTIALS_PATH not set; using application default credentials"
                )
                credential = credentials.ApplicationDefault()
            options = {"projectId": self._project_id} if self._project_id else None
            self._app = firebase_admin.initialize_app(credential, options, name=self._app_name)
            logger.info("Firebase Admin SDK initialized (app=%s)", self._app_name)
        return self._app

    def _build_data(self, data: Mapping[str, str]) -> dict[str, str]:
        payload = {str(key): str(value) for key, value in data.items()}
        payload["click_action"] = self._click_action
        payload["timestamp"] = datetime.now(timezone.utc).isoformat()
        return payload

    @staticmethod
    def _build_notification(notification: PushNotification) -> messaging.Notification:
        return messaging.Notification(
            title=notification.title,
            body=notification.body,
            image=notification.image_url,
        )

    @staticmethod
    def _build_android_config(notification: PushNotification) -> messaging.AndroidConfig:
        high = notification.priority == PRIORITY_HIGH
        return messaging.AndroidConfig(
            priority="high" if high else "normal",
            notification=messaging.AndroidNotification(
                sound="default",
                channel_id=notification.channel_id or "default",
                default_sound=True,
                default_vibrate_timings=True,
            ),
        )

    @staticmethod
    def _build_apns_config(notification: PushNotification) -> messaging.APNSConfig:
        return messaging.APNSConfig(
            headers={"apns-priority": "10" if notification.priority == PRIORITY_HIGH else "5"},
            payload=messaging.APNSPayload(
                aps=messaging.Aps(sound="default", badge=1, content_available=True),
            ),
        )


__all__ = ["DEFAULT_CLICK_ACTION", "FirebasePushGateway", "error_code_for"]
