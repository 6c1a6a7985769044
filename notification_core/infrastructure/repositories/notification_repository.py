"""Persistence helpers for notification records."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from notification_core.domain.entities import NotificationRecord
from notification_core.domain.errors import StoreWriteError
from notification_core.infrastructure.models import NotificationModel
from notification_core.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

logger = logging.getLogger(__name__)


class NotificationRepository:
    """Create, query and update :class:`NotificationRecord` objects.

    ``create`` inserts unconditionally; deduplicating repeated intents is the
    caller's concern. Every write failure is rolled back and raised as
    :class:`StoreWriteError`.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, record: NotificationRecord) -> NotificationRecord:
        model = NotificationModel(
            user_id=record.user_id,
            type=record.type,
            title=record.title,
            message=record.message,
            data=dict(record.data or {}),
            priority=record.priority,
            read=record.read,
            image_url=record.image_url,
            created_at=ensure_app_naive_datetime(record.created_at or now_in_app_timezone()),
            read_at=ensure_app_naive_datetime(record.read_at),
            expires_at=ensure_app_naive_datetime(record.expires_at),
        )
        with self._writing("create notification"):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: int) -> NotificationRecord | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model is not None else None

    def list_for_user(
        self,
        user_id: str,
        *,
        limit: int | None = 20,
        offset: int = 0,
        notification_type: str | None = None,
        read: bool | None = None,
    ) -> Sequence[NotificationRecord]:
        query = self._user_query(user_id, notification_type=notification_type, read=read)
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_for_user(
        self,
        user_id: str,
        *,
        notification_type: str | None = None,
        read: bool | None = None,
    ) -> int:
        return self._user_query(user_id, notification_type=notification_type, read=read).count()

    def unread_count(self, user_id: str) -> int:
        """Count unread records of ``user_id`` that have not expired yet."""

        now = ensure_app_naive_datetime(now_in_app_timezone())
        return (
            self._user_query(user_id, read=False)
            .filter(
                or_(
                    NotificationModel.expires_at.is_(None),
                    NotificationModel.expires_at > now,
                )
            )
            .count()
        )

    def mark_read(self, notification_id: int, *, user_id: str) -> bool:
        """Mark one record as read; return ``False`` when the user does not own it."""

        model = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
            .first()
        )
        if model is None:
            return False
        if not model.read:
            with self._writing("mark notification as read"):
                model.read = True
                model.read_at = ensure_app_naive_datetime(now_in_app_timezone())
                self.session.commit()
        return True

    def mark_all_read(self, user_id: str) -> int:
        with self._writing("mark all notifications as read"):
            updated = self._user_query(user_id, read=False).update(
                {
                    NotificationModel.read: True,
                    NotificationModel.read_at: ensure_app_naive_datetime(now_in_app_timezone()),
                },
                synchronize_session=False,
            )
            self.session.commit()
        return updated

    def delete(self, notification_id: int, *, user_id: str) -> bool:
        with self._writing("delete notification"):
            deleted = (
                self.session.query(NotificationModel)
                .filter(
                    NotificationModel.id == notification_id,
                    NotificationModel.user_id == user_id,
                )
                .delete(synchronize_session=False)
            )
            self.session.commit()
        return deleted > 0

    def delete_all(self, user_id: str) -> int:
        with self._writing("delete user notifications"):
            deleted = self._user_query(user_id).delete(synchronize_session=False)
            self.session.commit()
        return deleted

    def delete_expired(self, now: datetime | None = None) -> int:
        cutoff = ensure_app_naive_datetime(now or now_in_app_timezone())
        with self._writing("delete expired notifications"):
            deleted = (
                self.session.query(NotificationModel)
                .filter(
                    NotificationModel.expires_at.is_not(None),
                    NotificationModel.expires_at <= cutoff,
                )
                .delete(synchronize_session=False)
            )
            self.session.commit()
        return deleted

    def _user_query(
        self,
        user_id: str,
        *,
        notification_type: str | None = None,
        read: bool | None = None,
    ) -> Query:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if notification_type is not None:
            query = query.filter(NotificationModel.type == notification_type)
        if read is not None:
            query = query.filter(NotificationModel.read.is_(read))
        return query

    @contextmanager
    def _writing(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise StoreWriteError(f"Failed to {action}") from exc

    @staticmethod
    def _to_entity(model: NotificationModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            title=model.title,
            message=model.message,
            data=dict(model.data or {}),
            priority=model.priority,
            read=bool(model.read),
            image_url=model.image_url,
            created_at=ensure_app_timezone(model.created_at),
            read_at=ensure_app_timezone(model.read_at),
            expires_at=ensure_app_timezone(model.expires_at),
        )


__all__ = ["NotificationRepository"]
