"""Shared test fixtures for the push SDK test suite.

Provides mock host capabilities (notification center, location manager,
application) and an httpx client backed by ``httpx.MockTransport`` so the
SDK can be exercised without a device or network.
"""

from __future__ import annotations

import itertools
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from egoi_push.config import Settings
from egoi_push.credential_store import CredentialStore
from egoi_push.schemas.notifications import (
    Action,
    Geo,
    NotificationContent,
    NotificationRecord,
)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    """Settings with no persistence and no artificial delays."""
    return Settings(
        host="https://api.test",
        storage_path="",
        encryption_key="",
        image_timeout=2.0,
        category_registration_delay=0,
    )


@pytest.fixture
def store():
    return CredentialStore()


# ---------------------------------------------------------------------------
# Host mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_notification_center():
    """Mock notification center that remembers registered categories."""
    center = MagicMock()
    center.add = AsyncMock()
    center.badge_count.return_value = 0

    categories: list = []

    def _get():
        return list(categories)

    def _set(new):
        categories[:] = list(new)

    center.get_categories.side_effect = _get
    center.set_categories.side_effect = _set
    center.categories = categories
    return center


@pytest.fixture
def mock_location_manager():
    """Mock location manager: monitoring available, position unknown."""
    manager = MagicMock()
    manager.is_monitoring_available.return_value = True
    manager.current_location.return_value = None
    return manager


@pytest.fixture
def mock_host_app():
    """Mock host application that can open any URL."""
    app = MagicMock()
    app.can_open_url.return_value = True
    ids = itertools.count(1)
    app.begin_background_task.side_effect = lambda name, handler: next(ids)
    return app


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


class RecordingBackend:
    """httpx.MockTransport handler that records requests.

    ``status`` is returned for API calls; ``images`` maps URLs to bytes.
    """

    def __init__(self, status: int = 202):
        self.status = status
        self.images: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url in self.images:
            return httpx.Response(
                200, content=self.images[url], headers={"content-type": "image/png"}
            )
        if request.method == "GET":
            return httpx.Response(404)
        return httpx.Response(self.status)

    @property
    def api_calls(self) -> list[tuple[str, dict]]:
        """(path, json body) for every POST."""
        return [
            (r.url.path, json.loads(r.content))
            for r in self.requests
            if r.method == "POST"
        ]


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def http_client(backend):
    return httpx.AsyncClient(transport=httpx.MockTransport(backend))


# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_record():
    """Factory for NotificationRecord instances."""

    def _make(
        message_hash: str = "M1",
        contact_id: str = "590b169771",
        title: str = "Hello",
        body: str = "World",
        image: str = "",
        latitude: float = 0,
        longitude: float = 0,
        radius: float = 0,
        duration: int = 0,
        period_start: str | None = None,
        period_end: str | None = None,
        action_type: str = "",
        action_text: str = "",
        action_url: str = "",
        action_text_cancel: str = "",
    ) -> NotificationRecord:
        return NotificationRecord(
            message_hash=message_hash,
            contact_id=contact_id,
            content=NotificationContent(title=title, body=body, image=image),
            geo=Geo(
                latitude=latitude,
                longitude=longitude,
                radius=radius,
                duration=duration,
                period_start=period_start,
                period_end=period_end,
            ),
            actions=Action(
                type=action_type,
                text=action_text,
                url=action_url,
                text_cancel=action_text_cancel,
            ),
        )

    return _make


@pytest.fixture
def http_action():
    """Keyword arguments for a fully configured http action."""
    return dict(
        action_type="http",
        action_text="View",
        action_url="https://www.e-goi.com",
        action_text_cancel="Close",
    )
