"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text

from notification_core.infrastructure.database import Base
from notification_core.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation of an in-app notification record."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_read_created", "user_id", "read", "created_at"),
        Index("ix_notification_type_created", "type", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    title = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    priority = Column(String(10), nullable=False, default="normal")
    read = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    read_at = Column(DateTime(), nullable=True)
    expires_at = Column(DateTime(), nullable=True, index=True)


__all__ = ["NotificationModel"]
