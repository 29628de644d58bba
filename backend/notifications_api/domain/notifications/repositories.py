"""Notification domain repository protocols."""
from typing import Protocol

from notifications_api.domain.notifications.models import (
    CreateNotification,
    Notification,
    UpdateNotification,
)


class NotificationRepository(Protocol):
    """Notification repository protocol.

    Every method runs in its own transaction. Failures surface as
    NotFoundError, MappingError or StoreError after the transaction is rolled back.
    """

    async def find_all(self) -> list[Notification]:
        """List every notification ordered by id."""
        ...

    async def find_by_id(self, notification_id: str) -> Notification:
        """Get a notification by ID."""
        ...

    async def create(self, params: CreateNotification) -> Notification:
        """Create a notification and return it as persisted."""
        ...

    async def update(self, notification_id: str, params: UpdateNotification) -> Notification:
        """Update the description of a notification."""
        ...

    async def mark_read(self, notification_id: str) -> Notification:
        """Stamp read_at if the notification has not been read yet."""
        ...

    async def delete(self, notification_id: str) -> int:
        """Delete a notification. Returns the number of rows removed."""
        ...
