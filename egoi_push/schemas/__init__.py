"""Pydantic schemas for the push SDK."""

from egoi_push.schemas.display import (
    ContentUpdate,
    ImageAttachment,
    NotificationAction,
    NotificationCategory,
    NotificationRequest,
)
from egoi_push.schemas.events import EventType, FetchResult, TokenRegistrationResult
from egoi_push.schemas.notifications import (
    Action,
    Geo,
    NotificationContent,
    NotificationRecord,
)

__all__ = [
    "Action",
    "ContentUpdate",
    "EventType",
    "FetchResult",
    "Geo",
    "ImageAttachment",
    "NotificationAction",
    "NotificationCategory",
    "NotificationContent",
    "NotificationRecord",
    "NotificationRequest",
    "TokenRegistrationResult",
]
