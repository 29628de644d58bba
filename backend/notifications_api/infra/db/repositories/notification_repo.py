"""Notification repository."""
import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notifications_api.domain.common.errors import MappingError, NotFoundError, StoreError
from notifications_api.domain.common.types import generate_id
from notifications_api.domain.notifications.mapper import to_entity
from notifications_api.domain.notifications.models import (
    CreateNotification,
    Notification,
    UpdateNotification,
)
from notifications_api.domain.notifications.repositories import NotificationRepository
from notifications_api.infra.db.models.notification import NotificationModel

logger = logging.getLogger(__name__)

_notifications = NotificationModel.__table__
_COLUMNS = (
    _notifications.c.id,
    _notifications.c.user_id,
    _notifications.c.description,
    _notifications.c.read_at,
    _notifications.c.created_at,
)


class NotificationRepositoryImpl(NotificationRepository):
    """Notification repository backed by an async session factory.

    Holds no state besides the factory, so one instance can serve concurrent requests.
    Each call runs in its own session and transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Commit when the block completes, roll back on any exception (cancellation included)."""
        try:
            async with self.session_factory.begin() as session:
                yield session
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            # asyncpg connect failures and timeouts reach us unwrapped by SQLAlchemy
            logger.error("Notification %s rolled back: %s", operation, e)
            raise StoreError(operation, e) from e
        except MappingError as e:
            logger.error("Notification %s rolled back, unexpected row shape: %s", operation, e)
            raise

    async def find_all(self) -> list[Notification]:
        """List every notification ordered by id."""
        async with self._transaction("find_all") as session:
            result = await session.execute(select(*_COLUMNS).order_by(_notifications.c.id))
            return [to_entity(row) for row in result.mappings().all()]

    async def find_by_id(self, notification_id: str) -> Notification:
        """Get a notification by ID."""
        async with self._transaction("find_by_id") as session:
            result = await session.execute(
                select(*_COLUMNS).where(_notifications.c.id == notification_id)
            )
            row = result.mappings().first()
            if row is None:
                raise NotFoundError("Notification", notification_id)
            return to_entity(row)

    async def create(self, params: CreateNotification) -> Notification:
        """Insert a notification with a fresh id and the store's current time."""
        async with self._transaction("create") as session:
            result = await session.execute(
                insert(_notifications)
                .values(
                    id=generate_id(),
                    user_id=params.user_id,
                    description=params.description,
                    created_at=func.now(),
                )
                .returning(*_COLUMNS)
            )
            notification = to_entity(result.mappings().one())
        logger.info("Created notification %s for user %s", notification.id, notification.user_id)
        return notification

    async def update(self, notification_id: str, params: UpdateNotification) -> Notification:
        """Update the description. Raises NotFoundError (after rollback) when no row matches."""
        async with self._transaction("update") as session:
            result = await session.execute(
                update(_notifications)
                .where(_notifications.c.id == notification_id)
                .values(description=params.description)
                .returning(*_COLUMNS)
            )
            row = result.mappings().first()
            if row is None:
                raise NotFoundError("Notification", notification_id)
            return to_entity(row)

    async def mark_read(self, notification_id: str) -> Notification:
        """Stamp read_at with the store's time, keeping the first read time if already set."""
        async with self._transaction("mark_read") as session:
            result = await session.execute(
                update(_notifications)
                .where(_notifications.c.id == notification_id)
                .values(read_at=func.coalesce(_notifications.c.read_at, func.now()))
                .returning(*_COLUMNS)
            )
            row = result.mappings().first()
            if row is None:
                raise NotFoundError("Notification", notification_id)
            return to_entity(row)

    async def delete(self, notification_id: str) -> int:
        """Delete a notification. Zero rows removed is a valid result."""
        async with self._transaction("delete") as session:
            result = await session.execute(
                delete(_notifications).where(_notifications.c.id == notification_id)
            )
            deleted = result.rowcount or 0
        if deleted:
            logger.info("Deleted notification %s", notification_id)
        return deleted
