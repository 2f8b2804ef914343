import logging
from typing import Any

import httpx

from oneuptime.core.config import Settings, get_settings
from oneuptime.core.errors import DeliveryError

logger = logging.getLogger(__name__)

USER_AGENT = "OneUptime-Notifications/1.0"


class IntegrationClient:
    """Posts JSON payloads to Slack incoming webhooks, custom webhooks and Zapier hooks."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.transport = transport

    def post_json(self, channel: str, url: str, payload: dict[str, Any]) -> None:
        try:
            with httpx.Client(
                timeout=self.settings.integration_timeout_seconds,
                transport=self.transport,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=False,
            ) as client:
                response = client.post(url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DeliveryError(channel, str(exc)) from exc
        logger.debug("Delivered %s payload to %s", channel, url)
