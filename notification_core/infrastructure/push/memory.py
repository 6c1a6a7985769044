"""In-memory push gateway that records sends for local runs and tests."""

from __future__ import annotations

from collections import defaultdict, deque
from typing import Any, Mapping, Sequence

from notification_core.domain.entities import PushNotification, SubscriptionResult, TokenOutcome
from notification_core.domain.errors import ERROR_NOT_REGISTERED, GatewayError

from .gateway import PushGateway


class InMemoryPushGateway(PushGateway):
    """Push gateway that keeps everything in memory.

    Tokens can be marked as rejected with :meth:`reject_token` and whole calls
    can be failed with :meth:`fail_next`. Topic membership is tracked so that
    subscription calls behave idempotently, like the real provider.
    """

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.calls: list[str] = []
        self.topics: defaultdict[str, set[str]] = defaultdict(set)
        self._rejected_tokens: dict[str, str] = {}
        self._pending_failures: deque[str] = deque()
        self._message_counter = 0

    def reject_token(self, token: str, code: str = ERROR_NOT_REGISTERED) -> None:
        """Answer every future send to ``token`` with ``code``."""

        self._rejected_tokens[token] = code

    def fail_next(self, code: str, *, times: int = 1) -> None:
        """Fail the next ``times`` gateway calls as a whole with ``code``."""

        self._pending_failures.extend([code] * times)

    def reset(self) -> None:
        """Forget recorded sends, topics and configured failures."""

        self.sent.clear()
        self.calls.clear()
        self.topics.clear()
        self._rejected_tokens.clear()
        self._pending_failures.clear()
        self._message_counter = 0

    def call_count(self, method: str) -> int:
        return sum(1 for name in self.calls if name == method)

    async def send_single(
        self,
        token: str,
        notification: PushNotification,
        data: Mapping[str, str],
    ) -> str:
        self._begin_call("send_single")
        code = self._rejected_tokens.get(token)
        if code is not None:
            raise GatewayError(code, f"Token rejected: {code}", token=token)
        return self._record(notification, data, token=token)

    async def send_multicast(
        self,
        tokens: Sequence[str],
        notification: PushNotification,
        data: Mapping[str, str],
    ) -> list[TokenOutcome]:
        self._begin_call("send_multicast")
        outcomes: list[TokenOutcome] = []
        for token in tokens:
            code = self._rejected_tokens.get(token)
            if code is not None:
                outcomes.append(TokenOutcome(token=token, success=False, error_code=code))
                continue
            message_id = self._record(notification, data, token=token)
            outcomes.append(TokenOutcome(token=token, success=True, message_id=message_id))
        return outcomes

    async def send_topic(
        self,
        topic: str,
        notification: PushNotification,
        data: Mapping[str, str],
    ) -> str:
        self._begin_call("send_topic")
        return self._record(notification, data, topic=topic)

    async def subscribe(self, tokens: Sequence[str], topic: str) -> SubscriptionResult:
        self._begin_call("subscribe")
        accepted = [token for token in tokens if token not in self._rejected_tokens]
        self.topics[topic].update(accepted)
        return SubscriptionResult(
            success_count=len(accepted), failure_count=len(tokens) - len(accepted)
        )

    async def unsubscribe(self, tokens: Sequence[str], topic: str) -> SubscriptionResult:
        self._begin_call("unsubscribe")
        accepted = [token for token in tokens if token not in self._rejected_tokens]
        members = self.topics.get(topic)
        if members is not None:
            members.difference_update(accepted)
        return SubscriptionResult(
            success_count=len(accepted), failure_count=len(tokens) - len(accepted)
        )

    def _begin_call(self, method: str) -> None:
        self.calls.append(method)
        if self._pending_failures:
            code = self._pending_failures.popleft()
            raise GatewayError(code, f"Simulated {method} failure: {code}")

    def _record(
        self,
        notification: PushNotification,
        data: Mapping[str, str],
        *,
        token: str | None = None,
        topic: str | None = None,
    ) -> str:
        self._message_counter += 1
        message_id = f"msg-{self._message_counter}"
        self.sent.append(
            {
                "message_id": message_id,
                "token": token,
                "topic": topic,
                "title": notification.title,
                "body": notification.body,
                "data": dict(data),
            }
        )
        return message_id


__all__ = ["InMemoryPushGateway"]
