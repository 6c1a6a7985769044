"""Tests for the Firebase Cloud Messaging gateway with the SDK patched out."""

from __future__ import annotations

import types

import pytest
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from notification_core.application.push import DeliveryOrchestrator
from notification_core.domain.entities import NotificationIntent, PushNotification
from notification_core.domain.errors import GatewayError, TransientGatewayError
from notification_core.infrastructure.push import firebase as firebase_module
from notification_core.infrastructure.push.firebase import FirebasePushGateway, error_code_for

pytestmark = pytest.mark.anyio

APP = object()


@pytest.fixture
def firebase_gateway() -> FirebasePushGateway:
    gateway = FirebasePushGateway(click_action="OPEN_APP")
    gateway._app = APP
    return gateway


@pytest.fixture
def intent() -> NotificationIntent:
    return NotificationIntent(type="booking_status", title="Booking Update", body="accepted")


@pytest.fixture
def notification() -> PushNotification:
    return PushNotification(
        title="Booking Update",
        body="Your booking has been accepted",
        channel_id="booking_status",
        priority="high",
    )


@pytest.mark.parametrize(
    ("exc", "code"),
    [
        (messaging.UnregisteredError("gone"), "not-registered"),
        (messaging.SenderIdMismatchError("wrong sender"), "invalid-registration"),
        (
            firebase_exceptions.InvalidArgumentError("The registration token is not a valid FCM registration token"),
            "invalid-registration",
        ),
        (firebase_exceptions.InvalidArgumentError("Message is too big"), "unknown-error"),
        (firebase_exceptions.InvalidArgumentError("Invalid image URL"), "unknown-error"),
        (messaging.QuotaExceededError("slow down"), "rate-limited"),
        (firebase_exceptions.UnavailableError("down"), "transport-timeout"),
        (firebase_exceptions.DeadlineExceededError("late"), "transport-timeout"),
        (firebase_exceptions.InternalError("boom"), "unknown-error"),
        (None, "unknown-error"),
    ],
)
def test_error_code_for(exc, code) -> None:
    assert error_code_for(exc) == code


async def test_send_single_builds_full_message(monkeypatch, firebase_gateway, notification) -> None:
    captured = {}

    def fake_send(message, app=None):
        captured["message"] = message
        captured["app"] = app
        return "projects/demo/messages/1"

    monkeypatch.setattr(firebase_module.messaging, "send", fake_send)

    message_id = await firebase_gateway.send_single(
        "tok-valid-1", notification, {"bookingId": "BK123"}
    )

    message = captured["message"]
    assert message_id == "projects/demo/messages/1"
    assert captured["app"] is APP
    assert message.token == "tok-valid-1"
    assert message.notification.title == "Booking Update"
    assert message.data["bookingId"] == "BK123"
    assert message.data["click_action"] == "OPEN_APP"
    assert "timestamp" in message.data
    assert message.android.priority == "high"
    assert message.android.notification.channel_id == "booking_status"
    assert message.apns.headers == {"apns-priority": "10"}
    assert message.apns.payload.aps.badge == 1


async def test_send_single_translates_sdk_errors(monkeypatch, firebase_gateway, notification) -> None:
    def fake_send(message, app=None):
        raise messaging.UnregisteredError("Requested entity was not found.")

    monkeypatch.setattr(firebase_module.messaging, "send", fake_send)

    with pytest.raises(GatewayError) as excinfo:
        await firebase_gateway.send_single("tok-dead", notification, {})

    assert excinfo.value.code == "not-registered"
    assert excinfo.value.token == "tok-dead"


async def test_send_multicast_maps_each_response(monkeypatch, firebase_gateway, notification) -> None:
    def fake_send_each(message, app=None):
        assert message.tokens == ["tok-a", "tok-b", "tok-c"]
        responses = [
            types.SimpleNamespace(success=True, message_id="m-a", exception=None),
            types.SimpleNamespace(
                success=False, message_id=None, exception=messaging.UnregisteredError("gone")
            ),
            types.SimpleNamespace(success=True, message_id="m-c", exception=None),
        ]
        return types.SimpleNamespace(responses=responses, success_count=2, failure_count=1)

    monkeypatch.setattr(firebase_module.messaging, "send_each_for_multicast", fake_send_each)

    outcomes = await firebase_gateway.send_multicast(["tok-a", "tok-b", "tok-c"], notification, {})

    assert [outcome.success for outcome in outcomes] == [True, False, True]
    assert outcomes[0].message_id == "m-a"
    assert outcomes[1].token == "tok-b"
    assert outcomes[1].error_code == "not-registered"


async def test_send_topic_omits_apns_config(monkeypatch, firebase_gateway, notification) -> None:
    captured = {}

    def fake_send(message, app=None):
        captured["message"] = message
        return "projects/demo/messages/2"

    monkeypatch.setattr(firebase_module.messaging, "send", fake_send)

    await firebase_gateway.send_topic("workers", notification, {})

    assert captured["message"].topic == "workers"
    assert captured["message"].apns is None


async def test_subscribe_and_unsubscribe_report_counts(monkeypatch, firebase_gateway) -> None:
    calls = []

    def fake_subscribe(tokens, topic, app=None):
        calls.append(("subscribe", tokens, topic))
        return types.SimpleNamespace(success_count=2, failure_count=1)

    def fake_unsubscribe(tokens, topic, app=None):
        calls.append(("unsubscribe", tokens, topic))
        return types.SimpleNamespace(success_count=1, failure_count=0)

    monkeypatch.setattr(firebase_module.messaging, "subscribe_to_topic", fake_subscribe)
    monkeypatch.setattr(firebase_module.messaging, "unsubscribe_from_topic", fake_unsubscribe)

    subscribed = await firebase_gateway.subscribe(["t1", "t2", "t3"], "workers")
    unsubscribed = await firebase_gateway.unsubscribe(["t1"], "workers")

    assert (subscribed.success_count, subscribed.failure_count) == (2, 1)
    assert (unsubscribed.success_count, unsubscribed.failure_count) == (1, 0)
    assert calls[0] == ("subscribe", ["t1", "t2", "t3"], "workers")


def test_app_is_initialized_lazily_with_certificate(monkeypatch) -> None:
    created = {}

    def fake_get_app(name):
        raise ValueError(name)

    def fake_initialize_app(credential, options=None, name=None):
        created.update(credential=credential, options=options, name=name)
        return "app"

    monkeypatch.setattr(firebase_module.firebase_admin, "get_app", fake_get_app)
    monkeypatch.setattr(firebase_module.firebase_admin, "initialize_app", fake_initialize_app)
    monkeypatch.setattr(firebase_module.credentials, "Certificate", lambda path: f"cert:{path}")

    gateway = FirebasePushGateway(credentials_path="/secrets/sa.json", project_id="demo")

    assert gateway._get_app() == "app"
    assert gateway._get_app() == "app"
    assert created == {
        "credential": "cert:/secrets/sa.json",
        "options": {"projectId": "demo"},
        "name": "notification-core",
    }


async def test_payload_errors_do_not_flag_the_token(monkeypatch, firebase_gateway, intent) -> None:
    def fake_send(message, app=None):
        raise firebase_exceptions.InvalidArgumentError("Message is too big")

    monkeypatch.setattr(firebase_module.messaging, "send", fake_send)
    orchestrator = DeliveryOrchestrator(firebase_gateway, max_attempts=2, initial_delay=0)

    with pytest.raises(TransientGatewayError) as excinfo:
        await orchestrator.dispatch_single(intent, "tok-valid-1")

    # Retried as transient instead of returning an invalid-token result.
    assert excinfo.value.code == "unknown-error"


async def test_missing_multicast_responses_count_as_failures(
    monkeypatch, firebase_gateway, notification
) -> None:
    def fake_send_each(message, app=None):
        responses = [types.SimpleNamespace(success=True, message_id="m-a", exception=None)]
        return types.SimpleNamespace(responses=responses, success_count=1, failure_count=0)

    monkeypatch.setattr(firebase_module.messaging, "send_each_for_multicast", fake_send_each)

    outcomes = await firebase_gateway.send_multicast(["tok-a", "tok-b"], notification, {})

    assert [outcome.token for outcome in outcomes] == ["tok-a", "tok-b"]
    assert outcomes[1].success is False
    assert outcomes[1].error_code == "unknown-error"


async def test_client_side_sdk_errors_become_gateway_errors(
    monkeypatch, firebase_gateway, notification
) -> None:
    def fake_send(message, app=None):
        raise ValueError("Message must not contain more than one target")

    monkeypatch.setattr(firebase_module.messaging, "send", fake_send)

    with pytest.raises(GatewayError) as excinfo:
        await firebase_gateway.send_single("tok-valid-1", notification, {})

    assert excinfo.value.code == "unknown-error"
    assert isinstance(excinfo.value.__cause__, ValueError)


async def test_missing_credentials_file_becomes_gateway_error(
    monkeypatch, tmp_path, notification
) -> None:
    def fake_get_app(name):
        raise ValueError(name)

    monkeypatch.setattr(firebase_module.firebase_admin, "get_app", fake_get_app)
    gateway = FirebasePushGateway(credentials_path=str(tmp_path / "missing.json"))

    with pytest.raises(GatewayError) as excinfo:
        await gateway.send_single("tok-valid-1", notification, {})

    assert excinfo.value.code == "unknown-error"
    assert excinfo.value.token == "tok-valid-1"
