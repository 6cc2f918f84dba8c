"""Event and result schemas exchanged with the E-goi backend and the host."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class EventType(str, Enum):
    """Interaction events reported to E-goi."""

    OPEN = "open"
    CLOSE = "canceled"
    RECEIVED = "received"


class FetchResult(str, Enum):
    """Outcome of processing a remote notification, handed back to the host."""

    NEW_DATA = "new_data"
    NO_DATA = "no_data"
    FAILED = "failed"


class TokenRegistrationResult(BaseModel):
    """Result of registering the push token in the contact list."""

    success: bool
    message: str | None = None
