"""Turn notification records into host notifications."""

from __future__ import annotations

import asyncio

import httpx
import structlog

from egoi_push.config import Settings
from egoi_push.host import NotificationCenter
from egoi_push.payload import parse_actions, unwrap
from egoi_push.registry import NotificationRegistry
from egoi_push.schemas.display import (
    CLOSE_ACTION,
    CONFIRM_ACTION,
    LEGACY_CATEGORY,
    ContentUpdate,
    ImageAttachment,
    NotificationAction,
    NotificationCategory,
    NotificationRequest,
)
from egoi_push.schemas.notifications import Action, NotificationRecord

logger = structlog.get_logger()


def build_category(identifier: str, actions: Action) -> NotificationCategory:
    """Confirm/close buttons for a campaign action."""
    return NotificationCategory(
        identifier=identifier,
        actions=[
            NotificationAction(identifier=CONFIRM_ACTION, title=actions.text, foreground=True),
            NotificationAction(identifier=CLOSE_ACTION, title=actions.text_cancel, destructive=True),
        ],
    )


class NotificationPresenter:
    """Builds and schedules local notifications for pending records."""

    def __init__(
        self,
        notification_center: NotificationCenter,
        registry: NotificationRegistry,
        http_client: httpx.AsyncClient,
        settings: Settings,
    ):
        self.notification_center = notification_center
        self.registry = registry
        self.http_client = http_client
        self.settings = settings

    async def present_by_id(self, message_hash: str) -> bool:
        record = self.registry.get(message_hash)
        if record is None:
            logger.warning("notification_not_found", message_hash=message_hash)
            return False
        return await self.present(record)

    async def present(self, record: NotificationRecord) -> bool:
        """Ask the host to show ``record``. Returns False if the host refused it."""
        request = await self.build_request(record)
        try:
            await self.notification_center.add(request)
        except Exception:
            logger.exception("notification_schedule_failed", message_hash=record.message_hash)
            return False

        logger.info(
            "notification_scheduled",
            message_hash=record.message_hash,
            has_image=bool(request.attachments),
            has_actions=request.category_identifier is not None,
        )
        return True

    async def build_request(self, record: NotificationRecord) -> NotificationRequest:
        request = NotificationRequest(
            identifier=record.message_hash,
            title=record.content.title,
            body=record.content.body,
            badge=self._next_badge(),
            user_info={"key": record.message_hash},
            trigger_seconds=self.settings.notification_delay,
        )

        if record.content.image:
            attachment = await self.fetch_image(record.content.image)
            if attachment is not None:
                request.attachments = [attachment]

        if record.actions.is_configured:
            self.register_category(build_category(record.message_hash, record.actions))
            request.category_identifier = record.message_hash

        return request

    async def fetch_image(self, url: str) -> ImageAttachment | None:
        """Download the notification image, bounded by ``image_timeout``."""
        try:
            resp = await self.http_client.get(url, timeout=self.settings.image_timeout)
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("notification_image_failed", url=url, error=str(e))
            return None

        return ImageAttachment(
            data=resp.content,
            content_type=resp.headers.get("content-type"),
        )

    async def prepare_content(self, payload: dict) -> ContentUpdate:
        """Attach campaign buttons to a remote notification the host will display."""
        data = unwrap(payload) if isinstance(payload, dict) else {}
        message_hash = data.get("message-hash")
        raw_actions = data.get("actions")
        if not isinstance(message_hash, str) or not message_hash or not raw_actions:
            return ContentUpdate()

        actions = parse_actions(raw_actions)
        if not actions.is_configured:
            return ContentUpdate()

        self.register_category(build_category(message_hash, actions))
        # Give the host time to register the category before display
        await asyncio.sleep(self.settings.category_registration_delay)
        return ContentUpdate(category_identifier=message_hash)

    def register_category(self, category: NotificationCategory) -> None:
        categories = [
            c
            for c in self.notification_center.get_categories()
            if c.identifier != category.identifier
        ]
        categories.append(category)
        self.notification_center.set_categories(categories)

    def remove_categories(self, message_hash: str) -> None:
        """Drop the per-message category and the legacy temporary one."""
        stale = {LEGACY_CATEGORY, message_hash}
        categories = self.notification_center.get_categories()
        kept = [c for c in categories if c.identifier not in stale]
        if len(kept) != len(categories):
            self.notification_center.set_categories(kept)

    def _next_badge(self) -> int | None:
        try:
            return self.notification_center.badge_count() + 1
        except Exception:
            logger.warning("badge_count_unavailable", exc_info=True)
            return None
