"""Shared fixtures for the notification core test-suite."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Ensure the project root (which contains the ``notification_core`` package) is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PUSH_BACKEND", "memory")

from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from notification_core.application.push import DeliveryOrchestrator  # noqa: E402
from notification_core.infrastructure.database import (  # noqa: E402
    Base,
    build_engine,
    initialize_database,
)
from notification_core.infrastructure.notifications import TokenInvalidationPublisher  # noqa: E402
from notification_core.infrastructure.push import InMemoryPushGateway  # noqa: E402
from notification_core.infrastructure.repositories import NotificationRepository  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def db_session():
    """Yield a session bound to a fresh in-memory SQLite database."""

    engine = build_engine("sqlite://", poolclass=StaticPool)
    initialize_database(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def repository(db_session) -> NotificationRepository:
    return NotificationRepository(db_session)


@pytest.fixture
def gateway() -> InMemoryPushGateway:
    return InMemoryPushGateway()


@pytest.fixture
def orchestrator(gateway: InMemoryPushGateway) -> DeliveryOrchestrator:
    return DeliveryOrchestrator(gateway, max_attempts=3, initial_delay=0.01)


@pytest.fixture
def publisher() -> TokenInvalidationPublisher:
    return TokenInvalidationPublisher()
