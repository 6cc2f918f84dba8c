"""Schemas handed to the host notification center."""

from __future__ import annotations

from pydantic import BaseModel

# Action identifiers reported back by the host when the user responds.
DEFAULT_ACTION = "default"
CONFIRM_ACTION = "confirm"
CLOSE_ACTION = "close"

# Hosts on iOS report the system identifier for a plain tap.
DEFAULT_ACTIONS = frozenset({DEFAULT_ACTION, "com.apple.UNNotificationDefaultActionIdentifier"})

# Category left behind by older SDK releases; removed alongside per-message ones.
LEGACY_CATEGORY = "temp_cat"


class NotificationAction(BaseModel):
    """A button shown on a notification."""

    identifier: str
    title: str
    foreground: bool = False
    destructive: bool = False


class NotificationCategory(BaseModel):
    """A set of buttons registered with the host under an identifier."""

    identifier: str
    actions: list[NotificationAction] = []
    custom_dismiss_action: bool = True


class ImageAttachment(BaseModel):
    """Image bytes downloaded for a notification."""

    identifier: str = "image.png"
    data: bytes
    content_type: str | None = None


class NotificationRequest(BaseModel):
    """A local notification for the host to display."""

    identifier: str
    title: str
    body: str
    sound: str = "default"
    badge: int | None = None
    user_info: dict[str, str] = {}
    attachments: list[ImageAttachment] = []
    category_identifier: str | None = None
    trigger_seconds: float = 1.0
    repeats: bool = False


class ContentUpdate(BaseModel):
    """Changes to apply to a remote notification before the host shows it."""

    category_identifier: str | None = None
