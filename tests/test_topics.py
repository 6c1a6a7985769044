"""Tests for topic subscription management."""

from __future__ import annotations

import pytest

from notification_core.application.push import TopicSubscriptionManager
from notification_core.application.push import topics as topics_module
from notification_core.domain.errors import GatewayError, InvalidTargetError

pytestmark = pytest.mark.anyio


@pytest.fixture
def manager(gateway) -> TopicSubscriptionManager:
    return TopicSubscriptionManager(gateway)


async def test_subscribe_adds_tokens_to_topic(manager, gateway) -> None:
    result = await manager.subscribe(["tok-1", "tok-2", "tok-1", None], "/topics/promotions")

    assert result.success_count == 2
    assert result.failure_count == 0
    assert gateway.topics["promotions"] == {"tok-1", "tok-2"}


async def test_subscribe_accepts_a_single_token(manager, gateway) -> None:
    result = await manager.subscribe("tok-1", "promotions")

    assert result.success_count == 1
    assert gateway.topics["promotions"] == {"tok-1"}


async def test_subscribe_twice_is_idempotent(manager, gateway) -> None:
    await manager.subscribe(["tok-1"], "promotions")
    await manager.subscribe(["tok-1"], "promotions")

    assert gateway.topics["promotions"] == {"tok-1"}


async def test_unsubscribe_removes_tokens(manager, gateway) -> None:
    await manager.subscribe(["tok-1", "tok-2"], "promotions")

    result = await manager.unsubscribe(["tok-2"], "promotions")

    assert result.success_count == 1
    assert gateway.topics["promotions"] == {"tok-1"}


async def test_rejected_tokens_are_counted_as_failures(manager, gateway) -> None:
    gateway.reject_token("tok-dead")

    result = await manager.subscribe(["tok-1", "tok-dead"], "promotions")

    assert result.success_count == 1
    assert result.failure_count == 1


async def test_large_token_lists_are_chunked(manager, gateway, monkeypatch) -> None:
    monkeypatch.setattr(topics_module, "MAX_TOKENS_PER_REQUEST", 2)

    result = await manager.subscribe([f"tok-{index}" for index in range(5)], "promotions")

    assert gateway.call_count("subscribe") == 3
    assert result.success_count == 5


@pytest.mark.parametrize(
    ("tokens", "topic"),
    [([], "promotions"), (None, "promotions"), (["tok-1"], ""), (["tok-1"], "no spaces")],
)
async def test_invalid_input_never_reaches_gateway(manager, gateway, tokens, topic) -> None:
    with pytest.raises(InvalidTargetError):
        await manager.subscribe(tokens, topic)

    assert gateway.calls == []


async def test_gateway_errors_propagate(manager, gateway) -> None:
    gateway.fail_next("unknown-error")

    with pytest.raises(GatewayError):
        await manager.unsubscribe(["tok-1"], "promotions")
