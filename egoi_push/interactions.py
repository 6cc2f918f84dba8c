"""Handle the user's response to a notification or in-app dialog."""

from __future__ import annotations

from typing import Callable

import structlog

from egoi_push.host import HostApplication
from egoi_push.presenter import NotificationPresenter
from egoi_push.registry import NotificationRegistry
from egoi_push.schemas.display import CLOSE_ACTION, CONFIRM_ACTION, DEFAULT_ACTIONS
from egoi_push.schemas.events import EventType
from egoi_push.schemas.notifications import NotificationRecord

logger = structlog.get_logger()

EventEmitter = Callable[[EventType, NotificationRecord], object]
DeepLinkCallback = Callable[[NotificationRecord], None]


class InteractionHandler:
    """Reports interaction events and performs the campaign action.

    Events are handed to ``emit_event``, which is expected to send them in
    the background; one failed event never blocks the next.
    """

    def __init__(
        self,
        registry: NotificationRegistry,
        presenter: NotificationPresenter,
        host_app: HostApplication,
        emit_event: EventEmitter,
        deep_link_callback: DeepLinkCallback | None = None,
    ):
        self.registry = registry
        self.presenter = presenter
        self.host_app = host_app
        self.emit_event = emit_event
        self.deep_link_callback = deep_link_callback

    def on_interaction(self, record_id: str, action_identifier: str) -> bool:
        """Process a notification response. Returns False for unknown records."""
        record = self.registry.remove(record_id)
        if record is None:
            logger.warning("interaction_notification_not_found", message_hash=record_id)
            return False

        self.emit_event(EventType.RECEIVED, record)

        if action_identifier in DEFAULT_ACTIONS:
            # With campaign buttons configured, only the confirm button reports "open"
            if not record.actions.is_configured:
                self.emit_event(EventType.OPEN, record)
        elif action_identifier == CONFIRM_ACTION:
            self.emit_event(EventType.OPEN, record)
            self.perform_action(record)
        elif action_identifier == CLOSE_ACTION:
            self.emit_event(EventType.CLOSE, record)
        else:
            logger.info(
                "interaction_action_ignored",
                message_hash=record_id,
                action=action_identifier,
            )

        self.presenter.remove_categories(record.message_hash)
        return True

    def on_dialog_action(self, record: NotificationRecord, confirmed: bool) -> None:
        """Handle a button press on the in-app dialog shown for ``record``."""
        if confirmed:
            self.emit_event(EventType.OPEN, record)
            self.perform_action(record)
        else:
            self.emit_event(EventType.CLOSE, record)

    def perform_action(self, record: NotificationRecord) -> None:
        """Run the campaign's deep link or open its URL."""
        actions = record.actions
        if actions.type == "deeplink":
            if self.deep_link_callback is None:
                logger.warning("deep_link_callback_missing", message_hash=record.message_hash)
                return
            self.deep_link_callback(record)
        elif actions.type == "http":
            self._open_url(actions.url)
        else:
            logger.warning(
                "invalid_action_type",
                message_hash=record.message_hash,
                action_type=actions.type,
            )

    def _open_url(self, url: str) -> None:
        if not url:
            logger.warning("action_url_missing")
            return
        if not self.host_app.can_open_url(url):
            logger.warning("action_url_unsupported", url=url)
            return
        self.host_app.open_url(url)
