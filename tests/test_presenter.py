"""Tests for building and scheduling local notifications."""

from __future__ import annotations

import json

import httpx
import pytest

from egoi_push.presenter import NotificationPresenter
from egoi_push.registry import NotificationRegistry
from egoi_push.schemas.display import NotificationCategory


@pytest.fixture
def registry():
    return NotificationRegistry()


@pytest.fixture
def presenter(mock_notification_center, registry, http_client, settings):
    return NotificationPresenter(mock_notification_center, registry, http_client, settings)


def _scheduled(center):
    center.add.assert_awaited_once()
    return center.add.await_args[0][0]


class TestPresent:
    @pytest.mark.asyncio
    async def test_builds_basic_request(self, presenter, mock_notification_center, make_record):
        mock_notification_center.badge_count.return_value = 3

        assert await presenter.present(make_record(message_hash="M1", title="Hi", body="There"))

        request = _scheduled(mock_notification_center)
        assert request.identifier == "M1"
        assert request.title == "Hi"
        assert request.body == "There"
        assert request.badge == 4
        assert request.user_info == {"key": "M1"}
        assert request.trigger_seconds == 1.0
        assert request.repeats is False
        assert request.attachments == []
        assert request.category_identifier is None

    @pytest.mark.asyncio
    async def test_attaches_downloaded_image(
        self, presenter, mock_notification_center, make_record, backend
    ):
        backend.images["https://cdn.test/promo.png"] = b"\x89PNG..."

        await presenter.present(make_record(image="https://cdn.test/promo.png"))

        request = _scheduled(mock_notification_center)
        assert len(request.attachments) == 1
        assert request.attachments[0].data == b"\x89PNG..."
        assert request.attachments[0].content_type == "image/png"

    @pytest.mark.asyncio
    async def test_image_failure_still_presents(
        self, presenter, mock_notification_center, make_record
    ):
        await presenter.present(make_record(image="https://cdn.test/missing.png"))

        request = _scheduled(mock_notification_center)
        assert request.attachments == []

    @pytest.mark.asyncio
    async def test_image_timeout_still_presents(
        self, mock_notification_center, registry, settings, make_record
    ):
        def _slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(_slow))
        presenter = NotificationPresenter(mock_notification_center, registry, client, settings)

        assert await presenter.present(make_record(image="https://cdn.test/slow.png"))
        assert _scheduled(mock_notification_center).attachments == []

    @pytest.mark.asyncio
    async def test_configured_actions_register_category(
        self, presenter, mock_notification_center, make_record, http_action
    ):
        await presenter.present(make_record(message_hash="M1", **http_action))

        request = _scheduled(mock_notification_center)
        assert request.category_identifier == "M1"
        [category] = mock_notification_center.categories
        assert category.identifier == "M1"
        assert [(a.identifier, a.title) for a in category.actions] == [
            ("confirm", "View"),
            ("close", "Close"),
        ]
        assert category.actions[0].foreground
        assert category.actions[1].destructive

    @pytest.mark.asyncio
    async def test_partial_actions_have_no_buttons(
        self, presenter, mock_notification_center, make_record
    ):
        await presenter.present(make_record(action_type="http", action_text="View"))

        assert _scheduled(mock_notification_center).category_identifier is None
        assert mock_notification_center.categories == []

    @pytest.mark.asyncio
    async def test_host_failure_returns_false(
        self, presenter, mock_notification_center, make_record
    ):
        mock_notification_center.add.side_effect = RuntimeError("denied")
        assert await presenter.present(make_record()) is False

    @pytest.mark.asyncio
    async def test_present_by_id(self, presenter, registry, mock_notification_center, make_record):
        registry.put(make_record(message_hash="M9"))

        assert await presenter.present_by_id("M9") is True
        assert await presenter.present_by_id("unknown") is False
        mock_notification_center.add.assert_awaited_once()


class TestCategories:
    @pytest.mark.asyncio
    async def test_prepare_content_with_actions(self, presenter, mock_notification_center):
        payload = {
            "aps": {
                "message-hash": "M1",
                "actions": json.dumps(
                    {"type": "http", "text": "View", "url": "https://x.test", "text-cancel": "No"}
                ),
            }
        }

        update = await presenter.prepare_content(payload)

        assert update.category_identifier == "M1"
        assert [c.identifier for c in mock_notification_center.categories] == ["M1"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"message-hash": "M1"},
            {"message-hash": "M1", "actions": ""},
            {"message-hash": "M1", "actions": "{oops"},
            {"message-hash": "M1", "actions": json.dumps({"type": "http"})},
            {"actions": json.dumps({"type": "http", "text": "a", "url": "b", "text-cancel": "c"})},
        ],
    )
    async def test_prepare_content_without_buttons(
        self, presenter, mock_notification_center, payload
    ):
        update = await presenter.prepare_content(payload)

        assert update.category_identifier is None
        mock_notification_center.set_categories.assert_not_called()

    def test_remove_categories(self, presenter, mock_notification_center):
        mock_notification_center.categories[:] = [
            NotificationCategory(identifier="M1"),
            NotificationCategory(identifier="temp_cat"),
            NotificationCategory(identifier="M2"),
        ]

        presenter.remove_categories("M1")

        assert [c.identifier for c in mock_notification_center.categories] == ["M2"]

    def test_register_replaces_same_identifier(self, presenter, mock_notification_center):
        presenter.register_category(NotificationCategory(identifier="M1"))
        presenter.register_category(NotificationCategory(identifier="M1"))

        assert len(mock_notification_center.categories) == 1
