"""Parse inbound E-goi push payloads into notification records.

The backend sends every value as a string, including numbers and the nested
``actions`` JSON. Missing or unparseable numbers become 0 and missing strings
become "" so a single malformed field never drops the whole message.
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from pydantic import ValidationError

from egoi_push.schemas.notifications import (
    Action,
    Geo,
    NotificationContent,
    NotificationRecord,
)

logger = structlog.get_logger()


class InvalidPayloadError(ValueError):
    """The payload cannot be turned into a notification record."""


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _int(data: dict, key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def _float(data: dict, key: str) -> float:
    value = data.get(key)
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0.0
    return 0.0


def parse_actions(raw: Any) -> Action:
    """Decode the ``actions`` JSON string. Bad input yields an empty Action."""
    if isinstance(raw, dict):
        candidate = raw
    elif isinstance(raw, str) and raw.strip():
        try:
            candidate = json.loads(raw)
        except ValueError:
            logger.warning("invalid_actions_json")
            return Action()
    else:
        return Action()

    if not isinstance(candidate, dict):
        logger.warning("invalid_actions_json")
        return Action()

    try:
        return Action.model_validate(
            {k: v for k, v in candidate.items() if isinstance(v, str)}
        )
    except ValidationError:
        logger.warning("invalid_actions_json")
        return Action()


def unwrap(payload: dict) -> dict:
    """Return the E-goi fields, which may be nested under ``aps``."""
    aps = payload.get("aps")
    if isinstance(aps, dict) and "message-hash" in aps:
        return aps
    return payload


def parse_payload(payload: dict) -> NotificationRecord:
    """Build a NotificationRecord from a remote notification payload."""
    if not isinstance(payload, dict):
        raise InvalidPayloadError("payload must be a mapping")

    data = unwrap(payload)
    message_hash = data.get("message-hash")
    if not isinstance(message_hash, str) or not message_hash:
        raise InvalidPayloadError("payload has no message-hash")

    return NotificationRecord(
        message_hash=message_hash,
        contact_id=_str(data, "contact-id"),
        list_id=_int(data, "list-id"),
        account_id=_int(data, "account-id"),
        application_id=_str(data, "application-id"),
        message_id=_int(data, "message-id"),
        device_id=_int(data, "device-id"),
        content=NotificationContent(
            title=_str(data, "title"),
            body=_str(data, "body"),
            image=_str(data, "image"),
        ),
        geo=Geo(
            latitude=_float(data, "latitude"),
            longitude=_float(data, "longitude"),
            radius=_float(data, "radius"),
            duration=_int(data, "duration"),
            period_start=_optional_str(data, "time-start"),
            period_end=_optional_str(data, "time-end"),
        ),
        actions=parse_actions(data.get("actions")),
    )
