"""Database configuration and session management."""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from notification_core.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


logger = logging.getLogger(__name__)


def build_engine(database_url: str, **options: Any) -> Engine:
    """Create an engine for ``database_url`` with driver specific defaults."""

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        connect_args = options.setdefault("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
    else:
        options.setdefault("pool_pre_ping", True)
    logger.debug("Creating database engine for backend %s", url.get_backend_name())
    return create_engine(url, **options)


settings = get_settings()
engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def initialize_database(bind: Engine | None = None) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from notification_core.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=bind or engine, checkfirst=True)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


__all__ = ["Base", "SessionLocal", "build_engine", "engine", "get_db", "initialize_database"]
