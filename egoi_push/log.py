"""structlog setup shared by the SDK and its CLI."""

from __future__ import annotations

import logging
import re

import structlog

from egoi_push.config import Settings, get_settings

# Keys whose values are masked before rendering.
_SECRET_KEY_PATTERN = re.compile(
    r"(token|key|secret|password|credential|auth|api_key)",
    re.IGNORECASE,
)


def redact_secrets(logger, method_name: str, event_dict: dict) -> dict:
    """Mask secret-looking values (API keys, push tokens) in a log event."""
    for k, v in event_dict.items():
        if k == "event":
            continue
        if isinstance(v, str) and v and _SECRET_KEY_PATTERN.search(k):
            event_dict[k] = "[REDACTED]"
    return event_dict


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for the host process."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
