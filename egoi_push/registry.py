"""In-memory registry of received notifications, keyed by message hash."""

from __future__ import annotations

import structlog

from egoi_push.schemas.notifications import NotificationRecord

logger = structlog.get_logger()


class NotificationRegistry:
    """Pending notifications awaiting presentation or interaction.

    Entries are not persisted; a process restart drops them.
    """

    def __init__(self) -> None:
        self._records: dict[str, NotificationRecord] = {}

    def put(self, record: NotificationRecord) -> None:
        if record.message_hash in self._records:
            logger.debug("notification_replaced", message_hash=record.message_hash)
        self._records[record.message_hash] = record

    def get(self, message_hash: str) -> NotificationRecord | None:
        return self._records.get(message_hash)

    def remove(self, message_hash: str) -> NotificationRecord | None:
        """Remove and return a record. Absent keys are a no-op."""
        return self._records.pop(message_hash, None)

    def __contains__(self, message_hash: object) -> bool:
        return message_hash in self._records

    def __len__(self) -> int:
        return len(self._records)
