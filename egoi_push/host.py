"""Capabilities the host application provides to the SDK.

The SDK never talks to an operating system directly. The host hands the
facade one object per capability; tests hand it mocks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from egoi_push.schemas.display import NotificationCategory, NotificationRequest


@dataclass(frozen=True)
class Coordinate:
    """A device position."""

    latitude: float
    longitude: float


@dataclass
class MonitoredRegion:
    """A circular region the host is asked to watch for entry."""

    identifier: str
    latitude: float
    longitude: float
    radius: float  # metres
    notify_on_entry: bool = True
    notify_on_exit: bool = False
    expires_at: float | None = None  # event-loop time


class AuthorizationStatus(str, Enum):
    NOT_DETERMINED = "not_determined"
    WHEN_IN_USE = "when_in_use"
    ALWAYS = "always"
    RESTRICTED = "restricted"
    DENIED = "denied"


class NotificationCenter(Protocol):
    """Host notification presentation."""

    async def add(self, request: NotificationRequest) -> None:
        """Schedule a local notification. Raises on host failure."""

    def get_categories(self) -> list[NotificationCategory]: ...

    def set_categories(self, categories: list[NotificationCategory]) -> None: ...

    def badge_count(self) -> int: ...


class LocationManager(Protocol):
    """Host location and region monitoring."""

    def is_monitoring_available(self) -> bool: ...

    def current_location(self) -> Coordinate | None: ...

    def start_updating_location(self) -> None: ...

    def stop_updating_location(self) -> None: ...

    def start_monitoring(self, region: MonitoredRegion) -> None: ...

    def stop_monitoring(self, region: MonitoredRegion) -> None: ...

    def request_when_in_use_authorization(self) -> None: ...

    def request_always_authorization(self) -> None: ...

    def set_background_updates(self, enabled: bool) -> None: ...


class HostApplication(Protocol):
    """URL handling and background execution."""

    def can_open_url(self, url: str) -> bool: ...

    def open_url(self, url: str) -> None: ...

    def begin_background_task(self, name: str, expiration_handler: Callable[[], None]) -> int:
        """Ask the host for extra run time. Returns a task id."""

    def end_background_task(self, task_id: int) -> None: ...
