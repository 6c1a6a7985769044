"""Push delivery: error classification, orchestration and topic management."""

from .classification import (
    DEFAULT_CLASSIFICATION,
    Classifier,
    ErrorKind,
    build_classifier,
    classify,
)
from .orchestrator import DEFAULT_BATCH_SIZE, DeliveryOrchestrator, dispatch_with_timeout
from .topics import MAX_TOKENS_PER_REQUEST, TopicSubscriptionManager

__all__ = [
    "DEFAULT_CLASSIFICATION",
    "Classifier",
    "ErrorKind",
    "build_classifier",
    "classify",
    "DEFAULT_BATCH_SIZE",
    "DeliveryOrchestrator",
    "dispatch_with_timeout",
    "MAX_TOKENS_PER_REQUEST",
    "TopicSubscriptionManager",
]
