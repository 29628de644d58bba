"""Notification domain models."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Notification:
    """Notification domain model."""
    id: str
    user_id: str
    description: str
    read_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class CreateNotification:
    """Validated parameters for creating a notification."""
    user_id: str
    description: str


@dataclass(frozen=True)
class UpdateNotification:
    """Validated parameters for updating a notification. Only the description is mutable."""
    description: str
