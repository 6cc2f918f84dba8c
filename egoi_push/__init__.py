"""Push notification SDK for E-goi."""

from egoi_push.facade import EgoiPush
from egoi_push.log import configure_logging
from egoi_push.schemas.events import EventType, FetchResult, TokenRegistrationResult
from egoi_push.schemas.notifications import NotificationRecord

__all__ = [
    "EgoiPush",
    "EventType",
    "FetchResult",
    "NotificationRecord",
    "TokenRegistrationResult",
    "configure_logging",
]
