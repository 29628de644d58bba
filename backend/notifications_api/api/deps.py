"""API dependencies."""
from fastapi import Request

from notifications_api.domain.notifications import NotificationRepository
from notifications_api.infra.db.repositories.notification_repo import NotificationRepositoryImpl


def get_notification_repository(request: Request) -> NotificationRepository:
    """Repository bound to the session factory the application was started with."""
    return NotificationRepositoryImpl(request.app.state.session_factory)
