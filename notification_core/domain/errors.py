"""Exceptions raised by the notification delivery core."""

from __future__ import annotations

# Provider error codes reported by push gateway adapters.
ERROR_INVALID_REGISTRATION = "invalid-registration"
ERROR_NOT_REGISTERED = "not-registered"
ERROR_RATE_LIMITED = "rate-limited"
ERROR_TRANSPORT_TIMEOUT = "transport-timeout"
ERROR_UNKNOWN = "unknown-error"


class NotificationError(Exception):
    """Base class for notification delivery failures."""


class InvalidTargetError(NotificationError, ValueError):
    """No usable recipient was supplied; the gateway is never contacted."""


class GatewayError(NotificationError):
    """Push provider rejected a call.

    ``code`` is one of the provider error codes understood by the
    classification table; ``token`` is set when the failure concerns a single
    device token.
    """

    def __init__(self, code: str, message: str | None = None, *, token: str | None = None) -> None:
        self.code = code
        self.token = token
        super().__init__(message or code)


class TransientGatewayError(GatewayError):
    """Failure that may succeed on a later attempt (timeout, rate limit, unknown)."""


class PermanentTokenError(GatewayError):
    """Failure that will never succeed again for the affected token."""


class StoreWriteError(NotificationError):
    """A notification record could not be persisted."""


__all__ = [
    "ERROR_INVALID_REGISTRATION",
    "ERROR_NOT_REGISTERED",
    "ERROR_RATE_LIMITED",
    "ERROR_TRANSPORT_TIMEOUT",
    "ERROR_UNKNOWN",
    "GatewayError",
    "InvalidTargetError",
    "NotificationError",
    "PermanentTokenError",
    "StoreWriteError",
    "TransientGatewayError",
]
