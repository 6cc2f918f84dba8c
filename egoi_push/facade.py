"""EgoiPush: the single entry point the host application talks to."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

import httpx
import structlog

from egoi_push import credential_store as keys
from egoi_push.config import Settings, get_settings
from egoi_push.credential_store import CredentialStore
from egoi_push.geofence import GeofenceCoordinator
from egoi_push.host import (
    AuthorizationStatus,
    HostApplication,
    LocationManager,
    NotificationCenter,
)
from egoi_push.interactions import DeepLinkCallback, InteractionHandler
from egoi_push.payload import InvalidPayloadError, parse_payload
from egoi_push.presenter import NotificationPresenter
from egoi_push.registry import NotificationRegistry
from egoi_push.schemas.display import ContentUpdate
from egoi_push.schemas.events import EventType, FetchResult, TokenRegistrationResult
from egoi_push.schemas.notifications import NotificationRecord
from egoi_push.transport import Transport

logger = structlog.get_logger()

DialogCallback = Callable[[NotificationRecord], None]
TokenCallback = Callable[[TokenRegistrationResult], None]


class EgoiPush:
    """Configure once, then feed it tokens, payloads and user interactions.

    The host's notification center, location manager and application
    services are injected; nothing in the SDK reaches for process-wide
    singletons.
    """

    def __init__(
        self,
        notification_center: NotificationCenter,
        location_manager: LocationManager,
        host_app: HostApplication,
        settings: Settings | None = None,
        store: CredentialStore | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self.notification_center = notification_center
        self.location_manager = location_manager
        self.host_app = host_app
        self.store = store or CredentialStore(
            self.settings.storage_path or None, self.settings.encryption_key
        )
        self._http_client = http_client
        self._owns_http_client = http_client is None

        self.registry = NotificationRegistry()
        self.transport: Transport | None = None
        self.presenter: NotificationPresenter | None = None
        self.interactions: InteractionHandler | None = None
        self.geofence: GeofenceCoordinator | None = None

        self.geo_enabled = False
        self.dialog_callback: DialogCallback | None = None
        self.deep_link_callback: DeepLinkCallback | None = None

        self.token: str | None = None
        self.field: str | None = None
        self.value: str | None = None
        self.token_registered = False

        self._configured = False
        self._pending: set[asyncio.Task] = set()
        self._background_tasks: set[int] = set()

    @property
    def configured(self) -> bool:
        return self._configured

    # --- Configuration ---

    def configure(
        self,
        app_id: str,
        api_key: str,
        geo_enabled: bool = True,
        dialog_callback: DialogCallback | None = None,
        deep_link_callback: DeepLinkCallback | None = None,
    ) -> bool:
        """Store credentials and wire up the components. Call exactly once."""
        if self._configured:
            logger.warning("egoi_push_already_configured")
            return False
        if not app_id:
            logger.error("egoi_push_missing_app_id")
            return False
        if not api_key:
            logger.error("egoi_push_missing_api_key")
            return False

        self.store.set_many({keys.APP_ID: app_id, keys.API_KEY: api_key})
        self.token = self.store.get(keys.TOKEN)
        self.value = self.store.get(keys.TOKEN_IDENTIFIER)

        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.settings.request_timeout)

        self.geo_enabled = geo_enabled
        self.dialog_callback = dialog_callback
        self.deep_link_callback = deep_link_callback

        self.transport = Transport(app_id, api_key, self._http_client, self.settings)
        self.presenter = NotificationPresenter(
            self.notification_center, self.registry, self._http_client, self.settings
        )
        self.interactions = InteractionHandler(
            self.registry,
            self.presenter,
            self.host_app,
            self.send_event,
            deep_link_callback,
        )
        if geo_enabled:
            self.geofence = GeofenceCoordinator(
                self.location_manager, self.registry, self.presenter
            )

        self._configured = True
        logger.info("egoi_push_configured", app_id=app_id, geo_enabled=geo_enabled)
        return True

    def _require_configured(self, operation: str) -> bool:
        if not self._configured:
            logger.error("egoi_push_not_configured", operation=operation)
            return False
        return True

    # --- Token registration ---

    async def register_token(self, token: str) -> TokenRegistrationResult | None:
        """Record the device push token, re-sending it if it changed after registration.

        Returns the re-registration result, or None when nothing was sent.
        """
        if not token or token == self.token:
            return None

        self.token = token
        self.store.set(keys.TOKEN, token)
        logger.info("push_token_updated", registered=self.token_registered)

        if not self.token_registered:
            return None
        if self.field is None or self.value is None:
            logger.warning("push_token_update_failed", reason="missing field or value")
            return None

        result = await self.send_token(self.field, self.value)
        if not result.success:
            logger.warning("push_token_update_failed", reason=result.message)
        return result

    async def send_token(
        self,
        field: str | None,
        value: str | None,
        callback: TokenCallback | None = None,
    ) -> TokenRegistrationResult:
        """Register the token in the contact list, identified by field/value."""
        if field is not None:
            self.field = field
        if value is not None and value != self.value:
            self.value = value
            self.store.set(keys.TOKEN_IDENTIFIER, value)

        result = await self._send_token()
        if callback is not None:
            callback(result)
        return result

    async def _send_token(self) -> TokenRegistrationResult:
        if not self.token:
            return TokenRegistrationResult(success=False, message="No token to register")
        if not self._configured or self.transport is None:
            return TokenRegistrationResult(success=False, message="Missing account configuration")

        async with self._background_task("Send Token"):
            success = await self.transport.register_token(self.field, self.value, self.token)

        if success:
            self.token_registered = True
            return TokenRegistrationResult(success=True)
        return TokenRegistrationResult(success=False, message="Failed to register the token")

    # --- Events ---

    def send_event(self, kind: EventType, record: NotificationRecord) -> asyncio.Task | None:
        """Report an event in the background. Failures are only logged."""
        if not self._require_configured("send_event"):
            return None

        task = asyncio.create_task(self._send_event(kind, record))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _send_event(self, kind: EventType, record: NotificationRecord) -> bool:
        try:
            async with self._background_task("Send Event"):
                success = await self.transport.register_event(
                    kind, record.contact_id, record.message_hash
                )
        except Exception:
            logger.exception(
                "event_send_failed",
                event_type=kind.value,
                message_hash=record.message_hash,
            )
            return False

        logger.info(
            "event_sent",
            event_type=kind.value,
            message_hash=record.message_hash,
            success=success,
        )
        return success

    async def drain(self) -> None:
        """Wait for every outstanding event request."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @asynccontextmanager
    async def _background_task(self, name: str) -> AsyncIterator[None]:
        task_id: int | None = None

        def _expired() -> None:
            logger.warning("background_task_expired", name=name)
            self._end_background_task(task_id)

        task_id = self.host_app.begin_background_task(name, _expired)
        self._background_tasks.add(task_id)
        try:
            yield
        finally:
            self._end_background_task(task_id)

    def _end_background_task(self, task_id: int | None) -> None:
        if task_id is None or task_id not in self._background_tasks:
            return
        self._background_tasks.discard(task_id)
        self.host_app.end_background_task(task_id)

    # --- Notifications ---

    async def process_notification(self, payload: dict) -> FetchResult:
        """Store a received remote notification and set up its geofence."""
        if not self._require_configured("process_notification"):
            return FetchResult.FAILED

        try:
            record = parse_payload(payload)
        except InvalidPayloadError as e:
            logger.warning("notification_payload_invalid", error=str(e))
            return FetchResult.FAILED

        self.registry.put(record)
        logger.info("notification_received", message_hash=record.message_hash)

        if record.geo.is_present:
            if self.geofence is None:
                logger.info("geofence_disabled", message_hash=record.message_hash)
            else:
                await self.geofence.add_region(
                    record.geo.latitude,
                    record.geo.longitude,
                    record.geo.radius,
                    record.geo.duration_seconds,
                    record.message_hash,
                )

        return FetchResult.NO_DATA

    async def process_notification_content(self, payload: dict) -> ContentUpdate:
        """Add campaign buttons to a remote notification before it is shown."""
        if not self._require_configured("process_notification_content"):
            return ContentUpdate()
        return await self.presenter.prepare_content(payload)

    async def fire_notification(self, key: str) -> bool:
        """Present a pending notification locally."""
        if not self._require_configured("fire_notification"):
            return False
        return await self.presenter.present_by_id(key)

    def delete_pending_notification(self, key: str) -> None:
        self.registry.remove(key)
        if self.geofence is not None:
            self.geofence.remove_region(key)

    def handle_interaction(self, record_id: str, action_identifier: str) -> bool:
        if not self._require_configured("handle_interaction"):
            return False
        return self.interactions.on_interaction(record_id, action_identifier)

    def handle_foreground_notification(self, message_hash: str) -> bool:
        """Hand a notification to the dialog callback instead of a system banner.

        Returns False when no dialog callback is configured or the record is
        unknown, in which case the host should display it itself.
        """
        if not self._require_configured("handle_foreground_notification"):
            return False
        if self.dialog_callback is None:
            return False
        record = self.registry.get(message_hash)
        if record is None:
            logger.warning("notification_not_found", message_hash=message_hash)
            return False
        self.dialog_callback(record)
        return True

    def handle_dialog_action(self, message_hash: str, confirmed: bool) -> bool:
        if not self._require_configured("handle_dialog_action"):
            return False
        record = self.registry.remove(message_hash)
        if record is None:
            logger.warning("notification_not_found", message_hash=message_hash)
            return False
        self.interactions.on_dialog_action(record, confirmed)
        return True

    # --- Location ---

    def request_foreground_location_access(self) -> None:
        if self.geofence is not None:
            self.geofence.request_foreground_access()

    def request_background_location_access(self) -> None:
        if self.geofence is not None:
            self.geofence.request_background_access()

    def is_monitoring_available(self) -> bool:
        if self.geofence is None:
            return False
        return self.geofence.is_monitoring_available()

    async def on_region_entered(self, identifier: str) -> bool:
        if self.geofence is None:
            return False
        return await self.geofence.on_region_entered(identifier)

    def on_authorization_changed(self, status: AuthorizationStatus | str) -> None:
        if self.geofence is not None:
            self.geofence.on_authorization_changed(status)

    # --- Lifecycle ---

    async def aclose(self) -> None:
        if self.geofence is not None:
            self.geofence.close()
        await self.drain()
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
