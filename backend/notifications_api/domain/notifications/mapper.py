"""Record mapper between store rows, inbound payloads and Notification values.

The persisted shape (columns of the ``notifications`` table) and the wire shape
(the API schemas) meet only here. All functions are pure.
"""
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from notifications_api.domain.common.errors import MappingError, ValidationError
from notifications_api.domain.notifications.models import (
    CreateNotification,
    Notification,
    UpdateNotification,
)

NOTIFICATION_COLUMNS = ("id", "user_id", "description", "read_at", "created_at")


def _as_utc(value: datetime) -> datetime:
    """Naive timestamps coming back from the store are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _required_str(row: Mapping[str, Any], column: str) -> str:
    value = row[column]
    if not isinstance(value, str):
        raise MappingError(f"Column {column!r} must be a string, got {type(value).__name__}")
    return value


def to_entity(row: Mapping[str, Any]) -> Notification:
    """Convert a ``notifications`` row into a Notification."""
    missing = [column for column in NOTIFICATION_COLUMNS if column not in row]
    if missing:
        raise MappingError(f"Row is missing column(s): {', '.join(missing)}")

    created_at = row["created_at"]
    if not isinstance(created_at, datetime):
        raise MappingError(
            f"Column 'created_at' must be a timestamp, got {type(created_at).__name__}"
        )
    read_at = row["read_at"]
    if read_at is not None and not isinstance(read_at, datetime):
        raise MappingError(f"Column 'read_at' must be a timestamp or null, got {type(read_at).__name__}")

    return Notification(
        id=_required_str(row, "id"),
        user_id=_required_str(row, "user_id"),
        description=_required_str(row, "description"),
        read_at=_as_utc(read_at) if read_at is not None else None,
        created_at=_as_utc(created_at),
    )


def _description(payload: Mapping[str, Any]) -> str:
    description = payload.get("description")
    if not isinstance(description, str) or not description.strip():
        raise ValidationError("description is required and must be a non-empty string")
    return description


def _canonical_uuid(value: Optional[Any], field: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} is required and must be a UUID string")
    try:
        return str(UUID(value.strip()))
    except ValueError:
        raise ValidationError(f"{field} is not a valid UUID: {value!r}") from None


def from_create_request(payload: Mapping[str, Any]) -> CreateNotification:
    """Validate a create payload ``{user_id, description}``."""
    return CreateNotification(
        user_id=_canonical_uuid(payload.get("user_id"), "user_id"),
        description=_description(payload),
    )


def from_update_request(payload: Mapping[str, Any]) -> UpdateNotification:
    """Validate an update payload ``{description}``."""
    return UpdateNotification(description=_description(payload))


def parse_notification_id(raw: str) -> str:
    """Validate a notification id taken from a request path."""
    return _canonical_uuid(raw, "notification id")
