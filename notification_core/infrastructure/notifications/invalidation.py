"""Fan out invalid device token signals to interested listeners."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Union

from notification_core.utils.tokens import normalize_tokens

logger = logging.getLogger(__name__)

InvalidationListener = Callable[
    [str, frozenset[str]], Union[None, Awaitable[None]]
]


class TokenInvalidationPublisher:
    """Deliver ``(user_id, tokens)`` pairs to every registered listener.

    Whoever owns the device token registry subscribes here and removes the
    tokens it receives. Listeners may be plain functions or coroutine
    functions; a failing listener is logged and the remaining ones still run.
    """

    def __init__(self) -> None:
        self._listeners: list[InvalidationListener] = []

    def subscribe(self, listener: InvalidationListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it again."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear(self) -> None:
        self._listeners.clear()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self, user_id: str, tokens: Iterable[str]) -> None:
        invalid = frozenset(normalize_tokens(list(tokens)))
        if not invalid:
            return

        logger.info(
            "Publishing %d invalid device token(s) for user %s", len(invalid), user_id
        )
        for listener in list(self._listeners):
            try:
                result = listener(user_id, invalid)
                if inspect.isawaitable(result):
                    await result
            except Exception:  # noqa: BLE001
                logger.exception(
                    "Token invalidation listener %r failed for user %s", listener, user_id
                )


token_invalidation_publisher = TokenInvalidationPublisher()


__all__ = [
    "InvalidationListener",
    "TokenInvalidationPublisher",
    "token_invalidation_publisher",
]
