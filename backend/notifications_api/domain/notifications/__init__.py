"""Notifications domain."""
from notifications_api.domain.notifications.models import (
    CreateNotification,
    Notification,
    UpdateNotification,
)
from notifications_api.domain.notifications.repositories import NotificationRepository

__all__ = [
    "CreateNotification",
    "Notification",
    "NotificationRepository",
    "UpdateNotification",
]
