"""Push gateway adapters and the configured gateway singleton.

``PUSH_BACKEND=firebase`` (the default) sends through Firebase Cloud Messaging;
``PUSH_BACKEND=memory`` keeps everything in process for local runs and tests.
"""

from __future__ import annotations

from notification_core.config import PUSH_BACKEND_MEMORY, get_settings

from .gateway import PushGateway
from .memory import InMemoryPushGateway

_gateway_instance: PushGateway | None = None


def get_push_gateway() -> PushGateway:
    """Return the configured push gateway (one instance per process)."""

    global _gateway_instance
    if _gateway_instance is None:
        settings = get_settings()
        if settings.push_backend == PUSH_BACKEND_MEMORY:
            _gateway_instance = InMemoryPushGateway()
        else:
            from .firebase import FirebasePushGateway

            _gateway_instance = FirebasePushGateway(
                credentials_path=settings.firebase_credentials_path,
                project_id=settings.firebase_project_id,
                click_action=settings.push_android_click_action,
            )
    return _gateway_instance


def reset_push_gateway() -> None:
    """Drop the cached gateway so the next call rebuilds it from settings."""

    global _gateway_instance
    _gateway_instance = None


__all__ = [
    "InMemoryPushGateway",
    "PushGateway",
    "get_push_gateway",
    "reset_push_gateway",
]
