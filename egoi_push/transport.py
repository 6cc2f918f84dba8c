"""HTTP client for the E-goi push API."""

from __future__ import annotations

import httpx
import structlog

from egoi_push.config import Settings
from egoi_push.schemas.events import EventType

logger = structlog.get_logger()

# Only status code the push API uses for an accepted request.
ACCEPTED = 202


class Transport:
    """Registers tokens and interaction events with E-goi.

    Each call is a single POST; a failure is logged and reported as False,
    never retried.
    """

    def __init__(
        self,
        app_id: str,
        api_key: str,
        http_client: httpx.AsyncClient,
        settings: Settings,
    ):
        self.app_id = app_id
        self.api_key = api_key
        self.http_client = http_client
        self.settings = settings

    def _url(self, target: str) -> str:
        return f"{self.settings.backend_url}/push/apps/{self.app_id}/{target}"

    async def register_token(self, field: str | None, value: str | None, token: str) -> bool:
        payload = {
            "token": token,
            "os": self.settings.os_name,
            "two_steps_data": {"field": field, "value": value},
        }
        return await self._post("token", payload)

    async def register_event(
        self, kind: EventType, contact_id: str, message_hash: str
    ) -> bool:
        payload = {
            "os": self.settings.os_name,
            "event": EventType(kind).value,
            "contact": contact_id,
            "message_hash": message_hash,
        }
        return await self._post("event", payload)

    async def _post(self, target: str, payload: dict) -> bool:
        headers = {"ApiKey": self.api_key, "Content-Type": "application/json"}
        try:
            resp = await self.http_client.post(
                self._url(target),
                json=payload,
                headers=headers,
                timeout=self.settings.request_timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("egoi_request_error", target=target, error=str(e))
            return False

        if resp.status_code != ACCEPTED:
            logger.warning(
                "egoi_request_rejected",
                target=target,
                status_code=resp.status_code,
            )
            return False

        logger.debug("egoi_request_accepted", target=target)
        return True
