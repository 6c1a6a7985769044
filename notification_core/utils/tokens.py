"""Helpers for handling device tokens and topic names."""

from __future__ import annotations

import re
from typing import Final, Iterable, Iterator, Sequence, TypeVar

T = TypeVar("T")

_TOPIC_PREFIX: Final[str] = "/topics/"
_TOPIC_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9\-_.~%]+$")


def mask_token(token: str | None, *, visible: int = 12) -> str:
    """Return a log-safe prefix of ``token``."""

    if not token:
        return "<empty>"
    if len(token) <= visible:
        return token
    return f"{token[:visible]}..."


def normalize_tokens(tokens: Iterable[str | None] | str | None) -> list[str]:
    """Return the non-empty tokens of ``tokens`` without duplicates.

    A bare string is treated as a single token. First-occurrence order is kept.
    """

    if tokens is None:
        return []
    if isinstance(tokens, str):
        tokens = [tokens]

    unique: list[str] = []
    seen: set[str] = set()
    for token in tokens:
        if not token or not isinstance(token, str):
            continue
        token = token.strip()
        if not token or token in seen:
            continue
        seen.add(token)
        unique.append(token)
    return unique


def normalize_topic(topic: str | None) -> str | None:
    """Strip the optional ``/topics/`` prefix and validate the topic name.

    Returns ``None`` when the topic is empty or contains characters the push
    provider does not accept.
    """

    if not topic:
        return None
    name = topic.strip()
    if name.startswith(_TOPIC_PREFIX):
        name = name[len(_TOPIC_PREFIX):]
    if not name or not _TOPIC_PATTERN.match(name):
        return None
    return name


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` elements."""

    if size < 1:
        raise ValueError("size must be at least 1")
    for start in range(0, len(items), size):
        yield items[start:start + size]


__all__ = ["chunked", "mask_token", "normalize_tokens", "normalize_topic"]
