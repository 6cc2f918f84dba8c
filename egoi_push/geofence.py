"""Geofence coordinator: region monitoring, expiry timers and entry handling."""

from __future__ import annotations

import asyncio
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Mapping

import structlog

from egoi_push.geo import within_radius
from egoi_push.host import AuthorizationStatus, LocationManager, MonitoredRegion
from egoi_push.registry import NotificationRegistry
from egoi_push.schemas.notifications import Geo

if TYPE_CHECKING:
    from egoi_push.presenter import NotificationPresenter

logger = structlog.get_logger()


def _parse_hh_mm(value: str, day: datetime) -> datetime | None:
    """Return ``day`` at HH:MM, or None when the string is not a valid time."""
    parts = value.split(":")
    if len(parts) < 2:
        return None
    try:
        return day.replace(
            hour=int(parts[0]), minute=int(parts[1]), second=0, microsecond=0
        )
    except ValueError:
        return None


def within_active_window(geo: Geo, now: datetime) -> bool:
    """Whether ``now`` falls in the record's daily window.

    Records without a window are always active. An unparseable window is
    treated as closed.
    """
    if not geo.has_active_window:
        return True
    start = _parse_hh_mm(geo.period_start, now)
    end = _parse_hh_mm(geo.period_end, now)
    if start is None or end is None:
        return False
    return start <= now <= end


class GeofenceCoordinator:
    """Tracks monitored regions and fires their notifications on entry.

    A region leaves the monitored set exactly once: on entry (the
    notification is presented) or when its expiry timer fires (nothing is
    presented). Location updates run only while at least one region is
    monitored.
    """

    def __init__(
        self,
        location_manager: LocationManager,
        registry: NotificationRegistry,
        presenter: NotificationPresenter,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.location_manager = location_manager
        self.registry = registry
        self.presenter = presenter
        self.clock = clock
        self._regions: dict[str, MonitoredRegion] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def monitored_regions(self) -> Mapping[str, MonitoredRegion]:
        return MappingProxyType(self._regions)

    def is_monitoring_available(self) -> bool:
        return self.location_manager.is_monitoring_available()

    def request_foreground_access(self) -> None:
        self.location_manager.request_when_in_use_authorization()

    def request_background_access(self) -> None:
        self.location_manager.request_always_authorization()

    async def add_region(
        self,
        latitude: float,
        longitude: float,
        radius: float,
        duration_seconds: int,
        identifier: str,
    ) -> MonitoredRegion | None:
        """Start watching a region, or fire right away if already inside it.

        Returns the monitored region, or None when nothing is monitored.
        """
        if not self.location_manager.is_monitoring_available():
            logger.warning("geofence_monitoring_unavailable", region=identifier)
            return None

        region = MonitoredRegion(
            identifier=identifier,
            latitude=latitude,
            longitude=longitude,
            radius=radius,
        )

        # Re-adding an identifier replaces the old region and its timer
        self._stop_monitoring(identifier)

        if self._is_inside(region):
            logger.info("geofence_already_inside", region=identifier)
            await self.presenter.present_by_id(identifier)
            return None

        self.location_manager.start_updating_location()
        self.location_manager.start_monitoring(region)
        self._regions[identifier] = region

        if duration_seconds > 0:
            loop = asyncio.get_running_loop()
            self._timers[identifier] = loop.call_later(
                duration_seconds, self._expire, identifier
            )
            region.expires_at = loop.time() + duration_seconds

        logger.info(
            "geofence_created",
            region=identifier,
            radius_m=radius,
            duration_s=duration_seconds,
        )
        return region

    async def on_region_entered(self, identifier: str) -> bool:
        """Handle a host-reported entry. Returns whether a notification fired."""
        region = self._regions.get(identifier)
        if region is None:
            logger.warning("geofence_unknown_region", region=identifier)
            return False

        record = self.registry.get(identifier)
        if record is None:
            logger.warning("geofence_notification_not_found", region=identifier)
            return False

        if not within_active_window(record.geo, self.clock()):
            # Region keeps monitoring until the next entry or its expiry
            logger.info(
                "geofence_outside_active_window",
                region=identifier,
                period_start=record.geo.period_start,
                period_end=record.geo.period_end,
            )
            return False

        self._stop_monitoring(identifier)
        await self.presenter.present_by_id(identifier)
        return True

    def on_authorization_changed(self, status: AuthorizationStatus | str) -> None:
        try:
            status = AuthorizationStatus(status)
        except ValueError:
            status = None

        if status in (AuthorizationStatus.WHEN_IN_USE, AuthorizationStatus.NOT_DETERMINED):
            return
        if status == AuthorizationStatus.ALWAYS:
            self.location_manager.set_background_updates(True)
            return

        self.location_manager.stop_updating_location()
        self.location_manager.set_background_updates(False)
        logger.info("location_authorization_revoked", status=getattr(status, "value", None))

    def remove_region(self, identifier: str) -> bool:
        """Stop monitoring a region without presenting it."""
        return self._stop_monitoring(identifier)

    def close(self) -> None:
        """Cancel every pending expiry timer."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    def _expire(self, identifier: str) -> None:
        self._timers.pop(identifier, None)
        if self._stop_monitoring(identifier):
            logger.info("geofence_expired", region=identifier)

    def _stop_monitoring(self, identifier: str) -> bool:
        region = self._regions.pop(identifier, None)
        if region is None:
            return False

        self.location_manager.stop_monitoring(region)
        if not self._regions:
            self.location_manager.stop_updating_location()

        self._cancel_timer(identifier)
        logger.info("geofence_removed", region=identifier)
        return True

    def _cancel_timer(self, identifier: str) -> None:
        timer = self._timers.pop(identifier, None)
        if timer is not None:
            timer.cancel()

    def _is_inside(self, region: MonitoredRegion) -> bool:
        location = self.location_manager.current_location()
        if location is None:
            return False
        return within_radius(
            location.latitude,
            location.longitude,
            region.latitude,
            region.longitude,
            region.radius,
        )
