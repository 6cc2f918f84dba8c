"""Notification records built from E-goi push payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class NotificationContent(BaseModel):
    """What the user sees."""

    title: str = ""
    body: str = ""
    image: str = ""  # image URL, empty when the campaign has none


class Geo(BaseModel):
    """Geofence attached to a campaign message.

    (0, 0, 0) for latitude/longitude/radius means "no geofence".
    """

    latitude: float = 0
    longitude: float = 0
    radius: float = 0  # metres
    duration: int = 0  # milliseconds, as sent by the backend
    period_start: str | None = None  # "HH:MM"
    period_end: str | None = None  # "HH:MM"

    @property
    def is_present(self) -> bool:
        return self.latitude != 0 and self.longitude != 0 and self.radius != 0

    @property
    def duration_seconds(self) -> int:
        return self.duration // 1000

    @property
    def has_active_window(self) -> bool:
        return bool(self.period_start) and bool(self.period_end)


class Action(BaseModel):
    """Campaign action decoded from the ``actions`` JSON string."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = ""  # "deeplink" | "http"
    text: str = ""
    url: str = ""
    text_cancel: str = Field(default="", alias="text-cancel")

    @property
    def is_configured(self) -> bool:
        """All four fields are set, so confirm/close buttons apply."""
        return bool(self.type and self.text and self.url and self.text_cancel)


class NotificationRecord(BaseModel):
    """A received campaign message, keyed by its message hash."""

    message_hash: str = Field(min_length=1)
    os: str = "ios"

    # Routing
    contact_id: str = ""
    list_id: int = 0
    account_id: int = 0
    application_id: str = ""
    message_id: int = 0
    device_id: int = 0

    content: NotificationContent = Field(default_factory=NotificationContent)
    geo: Geo = Field(default_factory=Geo)
    actions: Action = Field(default_factory=Action)
