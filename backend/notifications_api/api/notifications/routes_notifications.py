"""Notification API routes."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict

from notifications_api.api.deps import get_notification_repository
from notifications_api.domain.common.errors import NotFoundError
from notifications_api.domain.notifications import Notification, NotificationRepository
from notifications_api.domain.notifications.mapper import (
    from_create_request,
    from_update_request,
    parse_notification_id,
)

router = APIRouter()


class NotificationCreateRequest(BaseModel):
    """Create notification request."""
    user_id: str
    description: str


class NotificationUpdateRequest(BaseModel):
    """Update notification request. Only the description can change."""
    description: str


class NotificationResponse(BaseModel):
    """Notification response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    description: str
    read_at: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationResponse":
        return cls.model_validate(notification)


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    repo: NotificationRepository = Depends(get_notification_repository),
):
    """List all notifications ordered by id."""
    notifications = await repo.find_all()
    return [NotificationResponse.from_entity(n) for n in notifications]


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(
    notification_id: str,
    repo: NotificationRepository = Depends(get_notification_repository),
):
    """Get a single notification."""
    notification = await repo.find_by_id(parse_notification_id(notification_id))
    return NotificationResponse.from_entity(notification)


@router.post("", response_model=NotificationResponse)
async def create_notification(
    request: NotificationCreateRequest,
    repo: NotificationRepository = Depends(get_notification_repository),
):
    """Create a notification for a user."""
    params = from_create_request(request.model_dump())
    notification = await repo.create(params)
    return NotificationResponse.from_entity(notification)


@router.put("/{notification_id}", response_model=NotificationResponse)
async def update_notification(
    notification_id: str,
    request: NotificationUpdateRequest,
    repo: NotificationRepository = Depends(get_notification_repository),
):
    """Replace the description of a notification."""
    target_id = parse_notification_id(notification_id)
    params = from_update_request(request.model_dump())
    notification = await repo.update(target_id, params)
    return NotificationResponse.from_entity(notification)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    repo: NotificationRepository = Depends(get_notification_repository),
):
    """Mark a notification as read."""
    notification = await repo.mark_read(parse_notification_id(notification_id))
    return NotificationResponse.from_entity(notification)


@router.delete("/{notification_id}", response_class=PlainTextResponse)
async def delete_notification(
    notification_id: str,
    repo: NotificationRepository = Depends(get_notification_repository),
):
    """Delete a notification. Deleting nothing is reported as not found."""
    target_id = parse_notification_id(notification_id)
    deleted = await repo.delete(target_id)
    if deleted == 0:
        raise NotFoundError("Notification", target_id)
    return PlainTextResponse(f"Successfully deleted {deleted} record(s)")
