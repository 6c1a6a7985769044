"""Tests for the invalid token publisher."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.anyio


async def test_publish_normalizes_tokens(publisher) -> None:
    received = []
    publisher.subscribe(lambda user_id, tokens: received.append((user_id, tokens)))

    await publisher.publish("U1", ["tok-1", "", "tok-1", "tok-2"])

    assert received == [("U1", frozenset({"tok-1", "tok-2"}))]


async def test_publish_without_tokens_is_silent(publisher) -> None:
    received = []
    publisher.subscribe(lambda user_id, tokens: received.append(user_id))

    await publisher.publish("U1", [])

    assert received == []


async def test_failing_listener_does_not_block_others(publisher, caplog) -> None:
    received = []

    def broken(user_id, tokens):
        raise RuntimeError("registry offline")

    publisher.subscribe(broken)
    publisher.subscribe(lambda user_id, tokens: received.append(user_id))

    await publisher.publish("U1", ["tok-1"])

    assert received == ["U1"]
    assert "registry offline" in caplog.text


async def test_unsubscribe_removes_listener(publisher) -> None:
    received = []
    unsubscribe = publisher.subscribe(lambda user_id, tokens: received.append(user_id))

    unsubscribe()
    await publisher.publish("U1", ["tok-1"])

    assert received == []
    assert publisher.listener_count == 0
