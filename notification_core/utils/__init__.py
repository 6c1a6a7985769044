"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    get_app_timezone,
    now_in_app_naive_datetime,
    now_in_app_timezone,
)
from .retry import DEFAULT_INITIAL_DELAY, DEFAULT_MAX_ATTEMPTS, retry_with_backoff

__all__ = [
    "DEFAULT_INITIAL_DELAY",
    "DEFAULT_MAX_ATTEMPTS",
    "ensure_app_naive_datetime",
    "ensure_app_timezone",
    "get_app_timezone",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
    "retry_with_backoff",
]
