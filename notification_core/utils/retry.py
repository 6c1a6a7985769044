"""Exponential backoff wrapper for fallible asynchronous operations."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import backoff

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 1.0


def _never_give_up(exc: Exception) -> bool:
    return False


def _log_backoff(details: dict[str, Any]) -> None:
    logger.warning(
        "Attempt %d failed with %s; retrying in %.2fs",
        details["tries"],
        type(details.get("exception")).__name__,
        details["wait"],
    )


def _log_giveup(details: dict[str, Any]) -> None:
    logger.error(
        "Giving up after %d attempt(s) (%.2fs elapsed): %s",
        details["tries"],
        details["elapsed"],
        details.get("exception"),
    )


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    retry_on: type[Exception] | tuple[type[Exception], ...] = Exception,
    giveup: Callable[[Exception], bool] | None = None,
) -> T:
    """Await ``operation`` until it succeeds or the attempt budget runs out.

    Attempt 1 runs immediately and attempt ``k`` waits
    ``initial_delay * 2 ** (k - 2)`` seconds. Only the calling task is
    suspended during the wait. Exceptions outside ``retry_on``, or for which
    ``giveup`` returns ``True``, are raised on the spot without consuming a
    delay. When every attempt fails the last exception is re-raised unchanged.

    The wait goes through ``backoff``, which sleeps with ``asyncio.sleep``;
    callers must run on the asyncio backend of anyio, not on trio.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    if initial_delay < 0:
        raise ValueError("initial_delay cannot be negative")

    async def attempt() -> T:
        return await operation()

    retrying = backoff.on_exception(
        backoff.expo,
        retry_on,
        max_tries=max_attempts,
        jitter=None,
        giveup=giveup or _never_give_up,
        on_backoff=_log_backoff,
        on_giveup=_log_giveup,
        raise_on_giveup=True,
        logger=None,
        base=2,
        factor=initial_delay,
    )(attempt)
    return await retrying()


__all__ = ["DEFAULT_INITIAL_DELAY", "DEFAULT_MAX_ATTEMPTS", "retry_with_backoff"]
