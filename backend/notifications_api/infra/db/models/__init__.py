"""Database models."""
from notifications_api.infra.db.models.notification import NotificationModel

__all__ = ["NotificationModel"]
