"""Out-of-band signals emitted by the notification pipeline."""

from .invalidation import (
    InvalidationListener,
    TokenInvalidationPublisher,
    token_invalidation_publisher,
)

__all__ = [
    "InvalidationListener",
    "TokenInvalidationPublisher",
    "token_invalidation_publisher",
]
