"""Mapping from push provider error codes to retry semantics."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Mapping

from notification_core.domain.errors import (
    ERROR_INVALID_REGISTRATION,
    ERROR_NOT_REGISTERED,
    ERROR_RATE_LIMITED,
    ERROR_TRANSPORT_TIMEOUT,
    ERROR_UNKNOWN,
)


class ErrorKind(str, Enum):
    """Retry semantics of a gateway failure."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"


DEFAULT_CLASSIFICATION: Mapping[str, ErrorKind] = {
    ERROR_INVALID_REGISTRATION: ErrorKind.PERMANENT,
    ERROR_NOT_REGISTERED: ErrorKind.PERMANENT,
    ERROR_RATE_LIMITED: ErrorKind.TRANSIENT,
    ERROR_TRANSPORT_TIMEOUT: ErrorKind.TRANSIENT,
    ERROR_UNKNOWN: ErrorKind.TRANSIENT,
}

Classifier = Callable[[str], ErrorKind]


def classify(code: str | None) -> ErrorKind:
    """Return the :class:`ErrorKind` for ``code``.

    Codes missing from the table are treated as transient so that an
    unrecognised provider answer never flags a token as invalid.
    """

    if code is None:
        return ErrorKind.TRANSIENT
    return DEFAULT_CLASSIFICATION.get(code, ErrorKind.TRANSIENT)


def build_classifier(overrides: Mapping[str, ErrorKind]) -> Classifier:
    """Return a classifier that consults ``overrides`` before the default table."""

    table = {**DEFAULT_CLASSIFICATION, **overrides}

    def _classify(code: str | None) -> ErrorKind:
        if code is None:
            return ErrorKind.TRANSIENT
        return table.get(code, ErrorKind.TRANSIENT)

    return _classify


__all__ = [
    "Classifier",
    "DEFAULT_CLASSIFICATION",
    "ERROR_INVALID_REGISTRATION",
    "ERROR_NOT_REGISTERED",
    "ERROR_RATE_LIMITED",
    "ERROR_TRANSPORT_TIMEOUT",
    "ERROR_UNKNOWN",
    "ErrorKind",
    "build_classifier",
    "classify",
]
