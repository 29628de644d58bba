"""Notification database model."""
from sqlalchemy import Column, DateTime, String, Text, func

from notifications_api.infra.db.base import Base


class NotificationModel(Base):
    """Notification addressed to a user."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    description = Column(Text, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
